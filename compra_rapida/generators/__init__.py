"""Sample data generators."""

from compra_rapida.generators.sample import SampleDataGenerator

__all__ = ["SampleDataGenerator"]

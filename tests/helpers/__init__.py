from .fakes import FakePageProvider
from .metric_delta import metric_delta, sample_value

__all__ = ["FakePageProvider", "metric_delta", "sample_value"]

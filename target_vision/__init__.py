# target_vision/__init__.py
"""Target-pair vision package – re-export high-level API."""
from .common import PairRecord, Side                        # noqa: F401
from .config import (                                       # noqa: F401
    CameraConfig, ConfigError, OutputConfig, PipelineConfig,
    TargetConfig, VisionConfig, read_config,
)
from .pairing import (                                      # noqa: F401
    form_pairs, rank_pairs, select_best, sort_targets, validate_alternation,
)
from .processor import FrameProcessor, FrameResult, VisionThread  # noqa: F401
from .target import Target, classify                        # noqa: F401
from .target_pair import TargetPair                         # noqa: F401

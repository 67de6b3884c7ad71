from .free_rects import BoxToPack, LayerPackResult, LocalBox, pack_layer, split_rect
from .heightmap import HeightMap

__all__ = [
    "BoxToPack",
    "LayerPackResult",
    "LocalBox",
    "pack_layer",
    "split_rect",
    "HeightMap",
]

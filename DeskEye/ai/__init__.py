from .strain_model import FrameStrainModel

__all__ = ["FrameStrainModel"]

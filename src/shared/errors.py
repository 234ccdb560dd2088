"""Exception taxonomy shared by all bridge components."""


class BridgeError(Exception):
    """Base class for every error raised by the bridge."""


class ModelLoadError(BridgeError):
    """The model document could not be read or parsed."""


class ConfigurationError(BridgeError):
    """Settings or control vectors that cannot work with the loaded model."""


class ModelConsistencyError(BridgeError):
    """The flat body/geom tables contradict each other."""


class MeshAssetError(BridgeError, FileNotFoundError):
    """A mesh geom references an asset file that does not exist."""


class UnsupportedGeometryError(BridgeError, ValueError):
    """A geom kind that has no renderable primitive (ellipsoid, height field)."""

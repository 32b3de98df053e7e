__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'argsplitter'
__author__ = 'Eiko Reishin (影皇嶺臣)'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

from . import manual
from .converters import *
from .expansion import *
from .faults import *
from .options import *
from .schemas import *
from .splitter import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 0, 0, "final", 0, "")

__all__ = (
    "__path__",
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info",
    "manual",
)

# Load the exposed API of the options
__all__ += options.__all__  # type: ignore[attr-defined]
# Load the exposed API of the schemas
__all__ += schemas.__all__  # type: ignore[attr-defined]
# Load the exposed API of the splitter
__all__ += splitter.__all__  # type: ignore[attr-defined]
# Load the exposed API of the converters
__all__ += converters.__all__  # type: ignore[attr-defined]
# Load the exposed API of the expansion
__all__ += expansion.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]

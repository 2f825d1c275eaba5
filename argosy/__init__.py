__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'argosy'
__author__ = 'Eiko Reishin (影皇嶺臣)'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

from .values import *
from .specification import *
from .definition import *
from .parsing import *
from .mapping import *
from .formatting import *
from .faults import *

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
    "version_info"
)

# Load the exposed API of the value cells
__all__ += values.__all__  # type: ignore[attr-defined]
# Load the exposed API of the specification parsers
__all__ += specification.__all__  # type: ignore[attr-defined]
# Load the exposed API of the definitions
__all__ += definition.__all__  # type: ignore[attr-defined]
# Load the exposed API of the tokenizer
__all__ += parsing.__all__  # type: ignore[attr-defined]
# Load the exposed API of the binder
__all__ += mapping.__all__  # type: ignore[attr-defined]
# Load the exposed API of the help renderer
__all__ += formatting.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]

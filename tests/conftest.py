"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import sys
from collections.abc import Callable
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local ostensibly package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of ostensibly modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("ostensibly"):
        del sys.modules[module_name]


@pytest.fixture
def generate() -> Callable[..., str]:
    """Generate declarations for in-memory sources.

    ``generate({"lib.js": text})`` uses module ``lib`` and default export ``Lib``.
    """
    from ostensibly.config.models import GeneratorConfig
    from ostensibly.ops import generate_declarations

    def _generate(
        sources: dict[str, str],
        *,
        module_name: str = "lib",
        default_export: str = "Lib",
        external_modules: list[str] | None = None,
    ) -> str:
        config = GeneratorConfig(
            module_name=module_name,
            default_export=default_export,
            external_modules=external_modules or [],
        )
        return generate_declarations(config, sources)

    return _generate

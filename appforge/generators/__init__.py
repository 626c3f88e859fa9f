"""appforge framework generators -- one scaffold producer per framework.

Each generator turns a ``Configuration`` into a ``GenerationResult``: a
virtual file tree (entry point, shell, build-tool config, feature modules),
a manifest, a readme and optional deployment descriptors.

Quick usage::

    from appforge.generators import default_registry
    from appforge.models import Configuration

    config = Configuration.from_values("web", "react", ["api"])
    result = default_registry().generate(config)
"""

from .base import FrameworkGenerator
from .electron import ElectronGenerator
from .flutter import FlutterGenerator
from .nextjs import NextJSGenerator
from .react import ReactGenerator
from .react_native import ReactNativeGenerator
from .registry import GeneratorRegistry, default_registry, supported_pairs
from .svelte import SvelteGenerator
from .tauri import TauriGenerator
from .templates import TemplateRenderer

__all__ = [
    # Contract and dispatch
    "FrameworkGenerator",
    "GeneratorRegistry",
    "default_registry",
    "supported_pairs",
    "TemplateRenderer",
    # Web
    "ReactGenerator",
    "NextJSGenerator",
    "SvelteGenerator",
    # Mobile
    "ReactNativeGenerator",
    "FlutterGenerator",
    # Desktop
    "ElectronGenerator",
    "TauriGenerator",
]

"""
figma-codegen — Figma component → React/TypeScript（Python 管線）

IRS（結構）/ IRT（token）/ IML（互動）三層 IR，再由確定性的產生器輸出
元件、型別、樣式、Storybook story 與 MDX 文件。
"""

__version__ = "0.1.0"

from .ir_builder import StructuralIRBuilder, build_irs, preview_tree, save_ir
from .token_ir import TokenIRBuilder, build_irt, resolve_alias
from .classifier import ARCHETYPES, classify
from .interaction import build_iml
from .token_matcher import match_tokens, match_variable
from .schemas import IRValidationError, validate_iml, validate_irs, validate_irt
from .generator import GeneratedCode, generate
from .docs import render_docs
from .token_bundle import compile_token_css
from .figma_reader import FigmaAPIClient, FigmaExport, load_export, parse_figma_url
from .pipeline import CompileResult, compile_component, save_artifacts
from .config import CodegenSettings, load_config, settings_from_config, validate_config

__all__ = [
    "__version__",
    "StructuralIRBuilder",
    "build_irs",
    "preview_tree",
    "save_ir",
    "TokenIRBuilder",
    "build_irt",
    "resolve_alias",
    "ARCHETYPES",
    "classify",
    "build_iml",
    "match_tokens",
    "match_variable",
    "IRValidationError",
    "validate_irs",
    "validate_irt",
    "validate_iml",
    "GeneratedCode",
    "generate",
    "render_docs",
    "compile_token_css",
    "FigmaAPIClient",
    "FigmaExport",
    "load_export",
    "parse_figma_url",
    "CompileResult",
    "compile_component",
    "save_artifacts",
    "CodegenSettings",
    "load_config",
    "settings_from_config",
    "validate_config",
]

"""
pipeline.py — raw Figma node + variables → generated component

Stage order:
  IRS → validate → IRT → validate → classify → IML → validate
      → token match → generate (+ MDX docs, token CSS)
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from .classifier import classify
from .docs import render_docs
from .generator import GeneratedCode, component_name, generate
from .interaction import build_iml
from .ir_builder import build_irs, save_ir
from .schemas import validate_iml, validate_irs, validate_irt, validate_token_matches
from .token_bundle import compile_token_css, token_manifest
from .token_ir import DEFAULT_MAX_ALIAS_DEPTH, build_irt, matchable_variables
from .token_matcher import match_tokens

logger = logging.getLogger(__name__)


@dataclass
class CompileResult:
    name: str
    irs: dict
    irt: dict
    iml: dict
    intelligence: dict
    token_matches: list = field(default_factory=list)
    code: Optional[GeneratedCode] = None
    docs: str = ""
    token_css: str = ""

    @property
    def unmatched_variables(self) -> list[str]:
        return [m["figmaVarName"] for m in self.token_matches if not m.get("matchedToken")]

    def manifest(self) -> dict:
        return {
            "component": self.name,
            "archetype": self.intelligence.get("category"),
            "confidence": self.intelligence.get("confidence"),
            "detectedFrom": self.intelligence.get("detectedFrom"),
            "contentSource": self.code.content_source if self.code else None,
            "counts": {
                "nodes": self.irs.get("stats", {}).get("nodeCount", 0),
                "slots": len(self.irs.get("slots", [])),
                "variants": len(self.irs.get("variants", [])),
                "tokens": len(self.irt.get("tokens", [])),
                "states": len(self.iml.get("states", [])),
                "matchedTokens": sum(1 for m in self.token_matches if m.get("matchedToken")),
            },
            "unmatchedVariables": self.unmatched_variables,
            "tokenVars": token_manifest(self.irt),
        }


def compile_component(raw_root: dict, variables=None, collections: Optional[dict] = None,
                      project_tokens: Optional[list] = None, figma_url: str = "", file_key: str = "",
                      max_alias_depth: int = DEFAULT_MAX_ALIAS_DEPTH,
                      extracted_at: Optional[str] = None) -> CompileResult:
    """Run every stage; raises IRValidationError when an IR breaks its contract."""
    variables = variables or {}
    collections = collections or {}

    irs = validate_irs(build_irs(raw_root, figma_url, file_key, extracted_at))
    irt = validate_irt(build_irt(variables, collections, [raw_root], max_alias_depth))
    intelligence = classify(irs)
    logger.info("Classified %r as %s (%.2f via %s)", irs["meta"]["name"], intelligence["category"],
                intelligence["confidence"], intelligence["detectedFrom"])
    iml = validate_iml(build_iml(irs, intelligence))

    matches = []
    if project_tokens:
        matches = validate_token_matches(
            match_tokens(matchable_variables(variables, collections, max_alias_depth), project_tokens))
        logger.info("Matched %d/%d variables to project tokens",
                    sum(1 for m in matches if m["matchedToken"]), len(matches))

    name = component_name(irs["meta"]["name"])
    code = generate(name, irs, irt, iml, matches)
    if code.content_source == "children":
        logger.debug("%s has no structural children or slots; rendering the children placeholder", name)
    return CompileResult(
        name=name,
        irs=irs,
        irt=irt,
        iml=iml,
        intelligence=intelligence,
        token_matches=matches,
        code=code,
        docs=render_docs(name, irs, irt, iml),
        token_css=compile_token_css(irt),
    )


def _write(path: str, content: str) -> str:
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)
    return path


def save_artifacts(result: CompileResult, output_dir: str = "./generated",
                   snapshot_dir: Optional[str] = None, docs: bool = True, token_css: bool = True) -> list[str]:
    """寫出元件檔案與 IR 快照，回傳寫入的路徑清單."""
    component_dir = os.path.join(output_dir, result.name)
    os.makedirs(component_dir, exist_ok=True)
    code = result.code
    written = [
        _write(os.path.join(component_dir, f"{result.name}.tsx"), code.component),
        _write(os.path.join(component_dir, f"{result.name}.types.ts"), code.types),
        _write(os.path.join(component_dir, f"{result.name}.styles.css"), code.styles),
        _write(os.path.join(component_dir, f"{result.name}.stories.tsx"), code.story),
    ]
    if docs:
        written.append(_write(os.path.join(component_dir, f"{result.name}.mdx"), result.docs))
    if token_css:
        written.append(_write(os.path.join(component_dir, "tokens.css"), result.token_css))

    snapshots = snapshot_dir or os.path.join(component_dir, ".ir")
    for filename, doc in (("irs.json", result.irs), ("irt.json", result.irt), ("iml.json", result.iml)):
        written.append(save_ir(doc, snapshots, filename))

    manifest_path = os.path.join(component_dir, "manifest.json")
    with open(manifest_path, "w", encoding="utf-8") as f:
        json.dump(result.manifest(), f, indent=2, ensure_ascii=False)
    written.append(manifest_path)
    logger.info("Wrote %d artifacts for %s to %s", len(written), result.name, component_dir)
    return written

"""Pydantic contracts for the IR documents passed between pipeline stages.

The builders emit plain dicts; these models only check them. A failure is an
upstream contract violation and surfaces as ``IRValidationError`` carrying the
dotted path of every offending field.
"""

from __future__ import annotations

from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .classifier import ARCHETYPES
from .token_ir import TOKEN_TYPES


class IRValidationError(ValueError):

    def __init__(self, kind: str, errors: list[tuple[str, str]]):
        self.kind = kind
        self.errors = errors
        path, message = errors[0] if errors else ("", "invalid document")
        text = f"{kind} validation failed: {path or '<root>'}: {message}"
        if len(errors) > 1:
            text += f" (+{len(errors) - 1} more)"
        super().__init__(text)

    @classmethod
    def from_pydantic(cls, kind: str, exc: ValidationError) -> "IRValidationError":
        errors = [(".".join(str(p) for p in err["loc"]), err["msg"]) for err in exc.errors()]
        return cls(kind, errors)


# ════════════════════════════════════════════════════════════
# IRS
# ════════════════════════════════════════════════════════════

class Color(BaseModel):
    r: float = Field(ge=0, le=1)
    g: float = Field(ge=0, le=1)
    b: float = Field(ge=0, le=1)
    a: float = Field(default=1, ge=0, le=1)


class GradientStop(BaseModel):
    position: float
    color: Color


class Paint(BaseModel):
    type: Literal["solid", "gradient", "image", "none"]
    color: Optional[Color] = None
    opacity: Optional[float] = Field(default=None, ge=0, le=1)
    gradientType: Optional[Literal["linear", "radial", "angular", "diamond"]] = None
    gradientStops: Optional[List[GradientStop]] = None
    gradientTransform: Optional[List[List[float]]] = None
    gradientHandlePositions: Optional[List[dict]] = None
    parentGradient: Optional[Paint] = None
    imageUrl: Optional[str] = None
    scaleMode: Optional[str] = None


class Stroke(BaseModel):
    type: Literal["solid", "none"]
    color: Optional[Color] = None
    width: Optional[float] = Field(default=None, ge=0)
    position: Optional[Literal["inside", "outside", "center"]] = None


class Offset(BaseModel):
    x: float = 0
    y: float = 0


class Effect(BaseModel):
    type: Literal["drop-shadow", "inner-shadow", "layer-blur", "background-blur"]
    radius: float = Field(ge=0)
    visible: bool = True
    color: Optional[Color] = None
    offset: Optional[Offset] = None
    spread: Optional[float] = None


class Padding(BaseModel):
    top: float = 0
    right: float = 0
    bottom: float = 0
    left: float = 0


class Layout(BaseModel):
    display: Literal["flex"]
    flexDirection: Literal["row", "column"]
    justifyContent: str
    alignItems: str
    gap: float = 0
    padding: Padding = Field(default_factory=Padding)
    flexWrap: Optional[str] = None


class Typography(BaseModel):
    fontFamily: str
    fontSize: float = Field(gt=0)
    fontWeight: float
    lineHeight: str
    letterSpacing: str
    textAlign: str
    textDecoration: str
    textTransform: str


class BoundingBox(BaseModel):
    x: float
    y: float
    width: float = Field(ge=0)
    height: float = Field(ge=0)


class VectorPath(BaseModel):
    data: str
    windingRule: str = "NONZERO"


class TextPath(BaseModel):
    data: str


class IRSNode(BaseModel):
    id: str
    name: str
    type: str
    zIndex: int = 0
    roleHint: Optional[Literal["button-root", "icon", "icon-left", "icon-right", "label",
                               "dialog-overlay", "input-root"]] = None
    boundingBox: Optional[BoundingBox] = None
    layout: Optional[Layout] = None
    fills: List[Paint] = Field(default_factory=list)
    strokes: List[Stroke] = Field(default_factory=list)
    effects: List[Effect] = Field(default_factory=list)
    typography: Optional[Typography] = None
    constraints: Optional[Dict[str, str]] = None
    blendMode: Optional[str] = None
    opacity: Optional[float] = Field(default=None, ge=0, le=1)
    cornerRadius: Optional[float] = Field(default=None, ge=0)
    rectangleCornerRadii: Optional[List[float]] = None
    characters: Optional[str] = None
    vectorPaths: List[VectorPath] = Field(default_factory=list)
    textPath: Optional[TextPath] = None
    boundVariables: Dict[str, str] = Field(default_factory=dict)
    variantProperties: Dict[str, str] = Field(default_factory=dict)
    slotName: Optional[str] = None
    children: List[IRSNode] = Field(default_factory=list)


class IRSMeta(BaseModel):
    name: str = Field(min_length=1)
    figmaUrl: str = ""
    nodeId: str
    type: str
    componentType: Literal["component-set", "component", "frame"]
    extractedAt: str
    sourceFileKey: str = ""


class Variant(BaseModel):
    name: str
    properties: Dict[str, str]
    nodeId: str = ""


class Slot(BaseModel):
    name: str = Field(min_length=1)
    type: Literal["text", "icon", "content", "action", "prefix", "suffix"]
    required: bool = False
    nodeId: Optional[str] = None


class LayoutIntent(BaseModel):
    horizontal: Literal["fixed", "fluid", "intrinsic"]
    vertical: Literal["fixed", "fluid", "intrinsic"]


class VisualHints(BaseModel):
    requiresPseudo: bool = False
    requiresMask: bool = False
    requiresFilterWorkaround: bool = False
    strokeMappingStrategy: Literal["pseudo", "outline"] = "outline"


class StateMappingEntry(BaseModel):
    figmaVariant: str
    semanticState: Literal["default", "hover", "pressed", "focus", "disabled", "custom"]


class IRSDocument(BaseModel):
    version: str
    meta: IRSMeta
    tree: IRSNode
    variants: List[Variant] = Field(default_factory=list)
    slots: List[Slot] = Field(default_factory=list)
    layoutIntent: LayoutIntent
    visualHints: VisualHints = Field(default_factory=VisualHints)
    stateMapping: List[StateMappingEntry] = Field(default_factory=list)

    @field_validator("slots")
    @classmethod
    def _unique_slot_names(cls, slots: List[Slot]) -> List[Slot]:
        seen = set()
        for slot in slots:
            if slot.name in seen:
                raise ValueError(f"duplicate slot name '{slot.name}'")
            seen.add(slot.name)
        return slots


# ════════════════════════════════════════════════════════════
# IRT
# ════════════════════════════════════════════════════════════

class AliasMarker(BaseModel):
    type: Literal["VARIABLE_ALIAS"]
    id: str


TokenValue = Union[AliasMarker, bool, int, float, str]


class Token(BaseModel):
    name: str = Field(min_length=1)
    semanticName: Optional[str] = None
    value: TokenValue
    type: Literal[TOKEN_TYPES]
    modes: Dict[str, TokenValue] = Field(default_factory=dict)
    sourceVariableId: Optional[str] = None
    collection: Optional[str] = None
    description: Optional[str] = None
    aliasOf: Optional[str] = None


class TokenEdge(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(alias="from")
    to: str
    relationship: Literal["alias", "reference", "derived"]


class TokenGraph(BaseModel):
    nodes: List[str] = Field(default_factory=list)
    edges: List[TokenEdge] = Field(default_factory=list)


class IRTDocument(BaseModel):
    version: str
    tokens: List[Token] = Field(default_factory=list)
    modeValues: Dict[str, Dict[str, TokenValue]] = Field(default_factory=dict)
    tokenGraph: TokenGraph = Field(default_factory=TokenGraph)
    tokenUsage: Dict[str, List[str]] = Field(default_factory=dict)


# ════════════════════════════════════════════════════════════
# IML
# ════════════════════════════════════════════════════════════

class State(BaseModel):
    name: Literal["default", "hover", "pressed", "focus", "disabled", "custom"]
    trigger: str = ""
    changes: dict = Field(default_factory=dict)
    ariaAttributes: Optional[Dict[str, str]] = None


class AriaMapping(BaseModel):
    model_config = ConfigDict(extra="allow")

    role: Optional[str] = None
    ariaLabel: Optional[str] = None
    ariaLabelledBy: Optional[str] = None
    ariaDescribedBy: Optional[str] = None
    ariaControls: Optional[str] = None
    ariaExpanded: Optional[bool] = None
    ariaDisabled: Optional[bool] = None


class KeyboardMapping(BaseModel):
    key: str
    action: str
    target: Optional[str] = None
    preventDefault: bool = False


class InteractionRule(BaseModel):
    trigger: str = Field(pattern=r"^on[A-Z]\w*$")
    action: str
    target: Optional[str] = None
    condition: Optional[str] = None


class IMLDocument(BaseModel):
    version: str
    componentCategory: Literal[ARCHETYPES]
    states: List[State] = Field(min_length=1)
    aria: AriaMapping = Field(default_factory=AriaMapping)
    keyboard: List[KeyboardMapping] = Field(default_factory=list)
    interactions: List[InteractionRule] = Field(default_factory=list)
    requiredPrimitives: List[str] = Field(default_factory=list)


# ════════════════════════════════════════════════════════════
# Token matches
# ════════════════════════════════════════════════════════════

class MatchedToken(BaseModel):
    name: str
    value: Union[bool, int, float, str]
    type: str
    cssVar: str


class TokenMatch(BaseModel):
    figmaVarName: str
    figmaVarId: str
    matchedToken: Optional[MatchedToken] = None
    confidence: float = Field(ge=0, le=1)


def _validate(kind: str, model: type[BaseModel], doc) -> dict:
    try:
        model.model_validate(doc)
    except ValidationError as exc:
        raise IRValidationError.from_pydantic(kind, exc) from exc
    return doc


def validate_irs(doc: dict) -> dict:
    return _validate("IRS", IRSDocument, doc)


def validate_irt(doc: dict) -> dict:
    return _validate("IRT", IRTDocument, doc)


def validate_iml(doc: dict) -> dict:
    return _validate("IML", IMLDocument, doc)


def validate_token_matches(matches: list) -> list:
    for index, match in enumerate(matches):
        try:
            TokenMatch.model_validate(match)
        except ValidationError as exc:
            err = IRValidationError.from_pydantic("TokenMatch", exc)
            raise IRValidationError("TokenMatch", [(f"{index}.{p}", m) for p, m in err.errors]) from exc
    return matches

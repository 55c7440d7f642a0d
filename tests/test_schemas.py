"""IR contract 驗證：錯誤訊息需帶欄位路徑."""
import pytest

from figma_codegen.classifier import classify
from figma_codegen.interaction import build_iml
from figma_codegen.ir_builder import build_irs
from figma_codegen.schemas import (
    IRValidationError,
    validate_iml,
    validate_irs,
    validate_irt,
    validate_token_matches,
)
from figma_codegen.token_ir import build_irt


def test_valid_irs_passes(raw_button):
    irs = build_irs(raw_button)
    assert validate_irs(irs) is irs


def test_duplicate_slot_rejected(raw_button):
    irs = build_irs(raw_button)
    irs["slots"].append(dict(irs["slots"][0]))
    with pytest.raises(IRValidationError) as exc:
        validate_irs(irs)
    assert exc.value.kind == "IRS"
    assert "duplicate slot name 'label'" in str(exc.value)
    assert exc.value.errors[0][0] == "slots"


def test_irt_path_in_message(variables, collections):
    irt = build_irt(variables, collections)
    irt["tokens"][0]["type"] = "bogus"
    with pytest.raises(IRValidationError) as exc:
        validate_irt(irt)
    assert exc.value.errors[0][0] == "tokens.0.type"
    assert "tokens.0.type" in str(exc.value)


def test_iml_trigger_pattern(raw_button):
    irs = build_irs(raw_button)
    iml = build_iml(irs, classify(irs))
    iml["interactions"][0]["trigger"] = "click"
    with pytest.raises(IRValidationError) as exc:
        validate_iml(iml)
    assert exc.value.errors[0][0] == "interactions.0.trigger"


def test_iml_requires_a_state():
    with pytest.raises(IRValidationError):
        validate_iml({"version": "1.0.0", "componentCategory": "button", "states": []})


def test_token_match_index_in_path():
    matches = [
        {"figmaVarName": "a", "figmaVarId": "V:1", "matchedToken": None, "confidence": 0.0},
        {"figmaVarName": "b", "figmaVarId": "V:2", "matchedToken": None, "confidence": 1.5},
    ]
    with pytest.raises(IRValidationError) as exc:
        validate_token_matches(matches)
    assert exc.value.errors[0][0] == "1.confidence"

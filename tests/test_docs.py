"""MDX 文件產生."""
from figma_codegen.classifier import classify
from figma_codegen.docs import MAX_TOKEN_ROWS, render_docs
from figma_codegen.interaction import build_iml
from figma_codegen.ir_builder import build_irs
from figma_codegen.token_ir import build_irt

FIGMA_URL = "https://www.figma.com/design/abc123/Kit?node-id=1-1"


def _docs(raw, irt=None, figma_url=""):
    irs = build_irs(raw, figma_url=figma_url, extracted_at="t")
    iml = build_iml(irs, classify(irs))
    return render_docs(irs["meta"]["name"], irs, irt, iml)


def test_button_docs(raw_button, variables, collections):
    mdx = _docs(raw_button, build_irt(variables, collections), FIGMA_URL)
    assert mdx.startswith("# ButtonPrimary\n")
    assert "(archetype: `button`)" in mdx
    assert f"**Figma Design:** [View in Figma]({FIGMA_URL})" in mdx
    assert '<ButtonPrimary label="ButtonPrimary" />' in mdx
    assert "### hover" in mdx
    assert '| `state` | `\'hover\'` | Figma variant property "state". |' in mdx
    assert "| `aria-labelledby` | `string` | - |" in mdx
    assert "| `color/primary/500` | `rgba(51, 102, 255, 1)` | color |" in mdx
    assert "- **ARIA Role:** `button`" in mdx
    assert "| `Enter` | activate |" in mdx
    assert "- **hover** (trigger: `:hover`)" in mdx


def test_union_types_escaped(raw_component_set):
    mdx = _docs(raw_component_set)
    assert "`'Small' \\| 'Large'`" in mdx


def test_container_docs(raw_empty_frame):
    mdx = _docs(raw_empty_frame)
    assert "<Container>Container</Container>" in mdx
    assert "## Variants" not in mdx
    assert "## Design Tokens" not in mdx
    assert "Keyboard Navigation" not in mdx
    assert "- **default**" in mdx


def test_token_rows_truncated(raw_empty_frame):
    irt = {"tokens": [{"name": f"space/{i}", "value": i, "type": "spacing"} for i in range(MAX_TOKEN_ROWS + 5)]}
    mdx = _docs(raw_empty_frame, irt)
    assert "| `space/19` |" in mdx
    assert "| `space/20` |" not in mdx
    assert "_5 more tokens not shown._" in mdx


def test_alias_token_row(raw_empty_frame):
    irt = {"tokens": [{"name": "color/a", "type": "color", "value": {"type": "VARIABLE_ALIAS", "id": "V:b"}}]}
    assert "`alias → V:b`" in _docs(raw_empty_frame, irt)

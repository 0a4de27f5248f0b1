import json

from agents.designer import generate_design, unique_strings
from contracts import GenerationQuality
from conftest import FakeInference

MESSAGE = "Landing page for a forecasting dashboard"


def test_unique_strings_is_case_insensitive_and_ordered():
    assert unique_strings(["#ABC", " #abc ", "", "Inter", "inter", "#def"]) == ["#ABC", "Inter", "#def"]


async def test_palette_colors_lead_and_are_deduplicated(brand):
    reply = json.dumps({
        "designDoc": "Bold, data-forward visual language.",
        "designTokensColors": ["#2563eb", "#10B981", "#10b981"],
        "designTokensFonts": ["Inter", "IBM Plex Sans"],
    })
    inference = FakeInference({"designer": reply})

    design = await generate_design(inference, "m", MESSAGE, brand, None, GenerationQuality.BALANCED)

    palette = brand.color_palette.as_list()
    assert design.design_doc == "Bold, data-forward visual language."
    assert design.design_tokens.colors[:5] == palette
    assert design.design_tokens.colors[5:] == ["#10B981"]
    assert design.design_tokens.fonts == ["Inter", "IBM Plex Sans"]


async def test_fonts_are_capped_at_four(brand):
    reply = json.dumps({
        "designDoc": "doc",
        "designTokensFonts": ["A", "B", "a", "C", "D", "E"],
    })
    inference = FakeInference({"designer": reply})

    design = await generate_design(inference, "m", MESSAGE, brand, None, GenerationQuality.HIGH)

    assert design.design_tokens.fonts == ["A", "B", "C", "D"]


async def test_outage_uses_fallback_doc_and_default_fonts(brand):
    design = await generate_design(FakeInference(), "m", MESSAGE, brand, None, GenerationQuality.SPEED)

    assert design.design_doc.startswith(f"Design direction for {brand.name}")
    assert MESSAGE in design.design_doc
    assert design.design_tokens.colors == brand.color_palette.as_list()
    assert design.design_tokens.fonts == ["Manrope", "Space Grotesk"]


async def test_non_string_tokens_are_dropped(brand):
    reply = json.dumps({"designDoc": "doc", "designTokensColors": [1, None, "#000000"]})
    inference = FakeInference({"designer": reply})

    design = await generate_design(inference, "m", MESSAGE, brand, None, GenerationQuality.BALANCED)

    assert design.design_tokens.colors[-1] == "#000000"
    assert len(design.design_tokens.colors) == 6


async def test_palette_values_are_kept_verbatim(brand):
    payload = brand.model_dump(by_alias=True)
    payload["colorPalette"]["primary"] = " #2563EB "
    padded = type(brand).model_validate(payload)
    reply = json.dumps({"designDoc": "doc", "designTokensColors": ["#2563eb", "#10B981"]})

    design = await generate_design(FakeInference({"designer": reply}), "m", MESSAGE, padded, None, GenerationQuality.BALANCED)

    assert design.design_tokens.colors[0] == " #2563EB "
    assert design.design_tokens.colors[:5] == padded.color_palette.as_list()
    assert design.design_tokens.colors[5:] == ["#10B981"]

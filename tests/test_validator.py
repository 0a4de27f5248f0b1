import pytest

from agents.validator import validate_semantic_output
from contracts import DesignTokens
from conftest import valid_files


def test_minimal_valid_file_set_passes(brand):
    result = validate_semantic_output(valid_files(brand), brand)
    assert result.is_valid
    assert result.issues == []


@pytest.mark.parametrize("missing", ["src/App.tsx", "src/index.tsx", "src/styles.css"])
def test_missing_required_file_fails(brand, missing):
    files = valid_files(brand)
    del files[missing]
    result = validate_semantic_output(files, brand)
    assert not result.is_valid
    assert f"Missing required file: {missing}" in result.issues


def test_two_missing_colors_are_tolerated(brand):
    files = valid_files(brand)
    p = brand.color_palette
    files["src/styles.css"] = (
        files["src/styles.css"]
        .replace(p.accent, "var(--x)")
        .replace(p.text, "var(--y)")
    )
    assert validate_semantic_output(files, brand).is_valid


def test_three_missing_colors_fail(brand):
    files = valid_files(brand)
    p = brand.color_palette
    for color in (p.accent, p.text, p.secondary):
        files["src/styles.css"] = files["src/styles.css"].replace(color, "inherit")
    result = validate_semantic_output(files, brand)
    assert not result.is_valid
    assert any(issue.startswith("Missing brand/design color values") for issue in result.issues)


def test_color_tolerance_is_configurable(brand):
    files = valid_files(brand)
    files["src/styles.css"] = files["src/styles.css"].replace(brand.color_palette.accent, "inherit")
    assert validate_semantic_output(files, brand).is_valid
    assert not validate_semantic_output(files, brand, missing_color_tolerance=0).is_valid


def test_color_match_is_case_insensitive(brand):
    files = valid_files(brand)
    files["src/styles.css"] = files["src/styles.css"].lower()
    assert validate_semantic_output(files, brand).is_valid


def test_design_token_colors_count_toward_tolerance(brand):
    tokens = DesignTokens(
        colors=brand.color_palette.as_list() + ["#111111", "#222222", "#333333"],
        fonts=["Manrope"],
    )
    result = validate_semantic_output(valid_files(brand), brand, tokens)
    assert not result.is_valid


def test_each_content_check_reports_its_own_issue(brand):
    files = valid_files(brand)
    files["src/styles.css"] = files["src/styles.css"].replace("--color-accent", "--accent")
    files["src/App.tsx"] = (
        "export default function App() { return <div>"
        f"{brand.color_palette.primary}</div>; }}\n"
    )
    result = validate_semantic_output(files, brand)

    assert not result.is_valid
    assert "Missing required CSS variables in src/styles.css: --color-accent" in result.issues
    assert any("<main> landmark" in issue for issue in result.issues)
    assert any("lucide-react" in issue for issue in result.issues)
    assert any("stats/social-proof" in issue for issue in result.issues)


def test_metric_keyword_satisfies_social_proof_check(brand):
    files = valid_files(brand)
    files["src/App.tsx"] = files["src/App.tsx"].replace('id="stats"', 'className="Metric-band"')
    assert validate_semantic_output(files, brand).is_valid

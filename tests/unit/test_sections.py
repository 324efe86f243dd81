"""
Unit Tests for the Section Parser
"""
from abg_insights.core.parsing import (
    parse_sections,
    AnalysisSections,
    INTERPRETATION_FALLBACK,
    CONDITIONS_FALLBACK,
    TREATMENT_FALLBACK,
)


class TestParseSections:
    """Tests for parse_sections()."""

    def test_all_three_sections(self, full_reply):
        sections = parse_sections(full_reply)

        assert isinstance(sections, AnalysisSections)
        assert sections.interpretation == (
            "- Primary disorder: metabolic acidosis\n"
            "- Partially compensated by respiratory alkalosis"
        )
        assert sections.conditions == "- Diabetic ketoacidosis\n- Lactic acidosis"
        assert sections.treatment == "- Fluid resuscitation\n- Repeat ABG in 2 hours"
        assert sections.missing == ()
        assert sections.is_complete

    def test_only_interpretation(self):
        sections = parse_sections("## INTERPRETATION\nRespiratory acidosis, uncompensated.")

        assert sections.interpretation == "Respiratory acidosis, uncompensated."
        assert sections.conditions == CONDITIONS_FALLBACK
        assert sections.treatment == TREATMENT_FALLBACK
        assert sections.missing == ("conditions", "treatment")

    def test_empty_text(self):
        sections = parse_sections("")

        assert sections.interpretation == INTERPRETATION_FALLBACK
        assert sections.conditions == CONDITIONS_FALLBACK
        assert sections.treatment == TREATMENT_FALLBACK
        assert not sections.is_complete

    def test_none_and_non_text_input(self):
        for raw in (None, 42, b"## INTERPRETATION x"):
            sections = parse_sections(raw)
            assert sections.missing == ("interpretation", "conditions", "treatment")

    def test_text_without_headings(self):
        sections = parse_sections("The patient has a metabolic acidosis.")
        assert sections.interpretation == INTERPRETATION_FALLBACK

    def test_case_insensitive_labels(self):
        text = "## interpretation\nA\n## Suggested Conditions\nB\n## treatment recommendations\nC"
        sections = parse_sections(text)

        assert (sections.interpretation, sections.conditions, sections.treatment) == ("A", "B", "C")

    def test_whitespace_and_newlines_between_token_and_label(self):
        text = "##\n   INTERPRETATION\n\nA\n\n\n##   SUGGESTED \n CONDITIONS   B  \n  ###\tTREATMENT\nRECOMMENDATIONS C"
        sections = parse_sections(text)

        assert sections.interpretation == "A"
        assert sections.conditions == "B"
        assert sections.treatment == "C"

    def test_sections_out_of_order(self):
        text = "## TREATMENT RECOMMENDATIONS\nC\n## INTERPRETATION\nA\n## SUGGESTED CONDITIONS\nB"
        sections = parse_sections(text)

        assert (sections.interpretation, sections.conditions, sections.treatment) == ("A", "B", "C")

    def test_bold_heading_with_colon(self):
        text = "## **INTERPRETATION**:\nA\n## **SUGGESTED CONDITIONS**\nB"
        sections = parse_sections(text)

        assert sections.interpretation == "A"
        assert sections.conditions == "B"
        assert sections.treatment == TREATMENT_FALLBACK

    def test_preamble_and_trailing_heading_are_excluded(self):
        text = (
            "Here is the analysis.\n"
            "## INTERPRETATION\nA\n"
            "## SUGGESTED CONDITIONS\nB\n"
            "## TREATMENT RECOMMENDATIONS\nC\n"
            "## DISCLAIMER\nNot a treatment plan."
        )
        sections = parse_sections(text)

        assert sections.interpretation == "A"
        assert sections.treatment == "C"

    def test_empty_section_body_falls_back(self):
        text = "## INTERPRETATION\n\n## SUGGESTED CONDITIONS\nB"
        sections = parse_sections(text)

        assert sections.interpretation == INTERPRETATION_FALLBACK
        assert sections.conditions == "B"
        assert "interpretation" in sections.missing

    def test_hash_inside_a_line_is_body_text(self):
        text = (
            "## INTERPRETATION\n"
            "Metabolic acidosis, #1 concern is perfusion.\n"
            "## SUGGESTED CONDITIONS\n"
            "DKA, stage #2 sepsis\n"
            "## TREATMENT RECOMMENDATIONS\n"
            "Fluids"
        )
        sections = parse_sections(text)

        assert sections.interpretation == "Metabolic acidosis, #1 concern is perfusion."
        assert sections.conditions == "DKA, stage #2 sepsis"
        assert sections.treatment == "Fluids"

    def test_numbered_reference_at_line_start_is_body_text(self):
        text = "## INTERPRETATION\nRespiratory acidosis.\n#1 priority: ventilation\n## SUGGESTED CONDITIONS\nCOPD"
        sections = parse_sections(text)

        assert sections.interpretation == "Respiratory acidosis.\n#1 priority: ventilation"
        assert sections.conditions == "COPD"

    def test_label_mid_line_is_not_a_heading(self):
        sections = parse_sections("Summary ## INTERPRETATION A")

        assert sections.interpretation == INTERPRETATION_FALLBACK

    def test_sub_heading_ends_section(self):
        text = "## INTERPRETATION\nA\n### Notes\nextra\n## SUGGESTED CONDITIONS\nB"
        sections = parse_sections(text)

        assert sections.interpretation == "A"
        assert sections.conditions == "B"

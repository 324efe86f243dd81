"""
Prompt templates for ABG analysis, and the deterministic reply served in
mock mode.
"""
import re
from typing import Optional

from abg_insights.core.measurement import Measurement
from abg_insights.core.clinical import AbgAssessment, assess

SYSTEM_INSTRUCTION = (
    "You are an expert medical AI assistant specializing in Arterial Blood Gas (ABG) "
    "interpretation. Your output supports clinical decision-making by medical "
    "professionals; it is not a definitive treatment plan."
)

DISCLAIMER = (
    "IMPORTANT DISCLAIMER: These suggestions assist clinical decision-making but are not "
    "definitive treatment plans. The treating physician must consider the full clinical context."
)

FULL_ANALYSIS_TEMPLATE = """Analyze the following ABG values comprehensively:
{values}

Provide three sections in your response:

## INTERPRETATION
Provide detailed interpretation including:
- Primary acid-base disorder
- Compensation status
- Oxygenation status
- Clinical significance

## SUGGESTED CONDITIONS
List 3-5 most likely underlying conditions with brief explanations

## TREATMENT RECOMMENDATIONS
Provide initial treatment recommendations including:
- Immediate interventions
- Supportive care
- Monitoring parameters
- When to escalate care

{disclaimer}

Format with clear section headers and bullet points."""

INTERPRET_TEMPLATE = """Analyze the following ABG values:
{values}

Please provide a detailed interpretation including:
1. Primary acid-base disorder (acidosis/alkalosis, metabolic/respiratory)
2. Compensation status (uncompensated, partially compensated, fully compensated)
3. Oxygenation status
4. Clinical significance

Format your response clearly with bullet points and be concise but thorough."""

CONDITIONS_TEMPLATE = """Based on the following ABG values and interpretation, suggest possible underlying medical conditions:

ABG Values:
{values}

Interpretation: {interpretation}

List 3-5 most likely underlying conditions that could cause this ABG pattern.
For each condition, provide:
- Condition name
- Brief explanation of why this condition matches the ABG pattern
- Key clinical features to look for

Be specific and clinically relevant. This is for medical professionals."""

TREATMENT_TEMPLATE = """Based on the following ABG analysis, provide treatment recommendations:

ABG Values:
{values}

Interpretation: {interpretation}

Suggested Conditions: {conditions}

Provide initial treatment recommendations including:
1. Immediate interventions needed
2. Supportive care measures
3. Monitoring parameters
4. When to escalate care

Important: Emphasize that these are suggestions to assist clinical decision-making,
not definitive treatment plans. The treating physician must consider the full clinical context.

Be specific, actionable, and prioritize patient safety."""


def full_analysis_prompt(measurement: Measurement) -> str:
    return FULL_ANALYSIS_TEMPLATE.format(values=measurement.describe(), disclaimer=DISCLAIMER)


def interpret_prompt(measurement: Measurement) -> str:
    return INTERPRET_TEMPLATE.format(values=measurement.describe())


def conditions_prompt(measurement: Measurement, interpretation: str) -> str:
    return CONDITIONS_TEMPLATE.format(values=measurement.describe(), interpretation=interpretation)


def treatment_prompt(measurement: Measurement, interpretation: str, conditions: str) -> str:
    return TREATMENT_TEMPLATE.format(
        values=measurement.describe(),
        interpretation=interpretation,
        conditions=conditions,
    )


def mock_full_analysis(measurement: Measurement, assessment: Optional[AbgAssessment] = None) -> str:
    """Well-formed three-section reply derived from the rule-based assessment."""
    assessment = assessment or assess(measurement)
    notes = "".join(f"\n- {note}" for note in assessment.notes)
    return (
        "[MOCK RESPONSE - Gemini unavailable]\n\n"
        "## INTERPRETATION\n"
        f"- Rule-based reading: {assessment.summary()}\n"
        f"{measurement.describe()}"
        f"{notes}\n\n"
        "## SUGGESTED CONDITIONS\n"
        "- Correlate with history, examination and electrolytes; "
        "condition suggestions require the language model.\n\n"
        "## TREATMENT RECOMMENDATIONS\n"
        "- Treat the underlying cause and repeat the ABG to confirm the trend.\n"
        f"- {DISCLAIMER}\n"
    )


_LINE_HEADING = re.compile(r"^[ \t]*#{1,6}[ \t]*", re.MULTILINE)


def _demote_headings(text: str) -> str:
    """Strip markdown heading tokens so step output cannot open a new section."""
    return _LINE_HEADING.sub("", text).strip()


def assemble_sections(interpretation: str, conditions: str, treatment: str) -> str:
    """Join the three stepwise replies into the single-call reply layout."""
    return (
        f"## INTERPRETATION\n{_demote_headings(interpretation)}\n\n"
        f"## SUGGESTED CONDITIONS\n{_demote_headings(conditions)}\n\n"
        f"## TREATMENT RECOMMENDATIONS\n{_demote_headings(treatment)}\n"
    )

# prompt_registry/catalog/compositions.py
from ..schemas import Composition

SKILL_CREATION = Composition(
    id="skill_creation",
    name="Skill Creation",
    description="Create a new skill from staged sources.",
    category="skills",
    output_format="json",
    block_ids=(
        "role_skill_creation",
        "source_fidelity",
        "citation_format",
        "scope_definition",
        "json_output",
    ),
    output_schema='{"title": "string", "content": "string", "summary": "string"}',
)

CHAT_RESPONSE = Composition(
    id="chat_response",
    name="Chat Response",
    description="Answer a question interactively from the skill library.",
    category="chat_rfp",
    output_format="markdown",
    block_ids=(
        "role_chat",
        "source_fidelity",
        "citation_format",
        "confidence_levels",
        "tone_guide",
    ),
)

RFP_SINGLE = Composition(
    id="rfp_single",
    name="RFP Single Question",
    description="Answer one questionnaire item as JSON.",
    category="chat_rfp",
    output_format="json",
    block_ids=(
        "role_chat",
        "source_fidelity",
        "confidence_levels",
        "json_output",
    ),
    output_schema='{"answer": "string", "confidence": "High|Medium|Low", "sources": ["string"]}',
)

DEFAULT_COMPOSITIONS = (
    SKILL_CREATION,
    CHAT_RESPONSE,
    RFP_SINGLE,
)

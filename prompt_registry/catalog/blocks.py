# prompt_registry/catalog/blocks.py
"""Default prompt blocks shipped with the deployment.

Edits made through the admin API are stored as overrides; the text here is
what "reset to default" returns to.
"""
from ..schemas import BlockDefinition, BlockTier

# ---------- Foundation (tier 1) ----------
SOURCE_FIDELITY = BlockDefinition(
    id="source_fidelity",
    name="Source Fidelity",
    description="Rules for using only what the provided sources say.",
    tier=BlockTier.LOCKED,
    content="""SOURCE FIDELITY:
- Only include information found in the provided sources
- Do not infer technical details that are not stated
- Prefer a short accurate answer over a long padded one
- If sources disagree, say so explicitly""",
)

JSON_OUTPUT = BlockDefinition(
    id="json_output",
    name="JSON Output",
    description="Forces a single machine-parseable JSON document as the reply.",
    tier=BlockTier.LOCKED,
    content="""OUTPUT FORMAT:
Respond with a single valid JSON object and nothing else.
Do not wrap the JSON in markdown fences.""",
)

# ---------- Accuracy (tier 2) ----------
CITATION_FORMAT = BlockDefinition(
    id="citation_format",
    name="Citation Format",
    description="How to reference sources inline.",
    tier=BlockTier.CAUTION,
    content="""CITATIONS:
- Cite sources inline as [1], [2] in the order they were provided
- Every factual claim must carry at least one citation""",
)

SCOPE_DEFINITION = BlockDefinition(
    id="scope_definition",
    name="Scope Definition",
    description="Describe what the produced skill covers and what it leaves out.",
    tier=BlockTier.CAUTION,
    content="""SCOPE:
Describe what this skill covers, which future additions belong here,
and which related topics are explicitly not included.""",
)

CONFIDENCE_LEVELS = BlockDefinition(
    id="confidence_levels",
    name="Confidence Levels",
    description="Shared vocabulary for answer confidence.",
    tier=BlockTier.CAUTION,
    content="""CONFIDENCE:
- High: directly stated in a source
- Medium: reasonably implied by a source
- Low: partially supported, needs review""",
)

# ---------- Style (tier 3) ----------
ROLE_SKILL_CREATION = BlockDefinition(
    id="role_skill_creation",
    name="Role: Skill Author",
    description="Persona used when turning sources into a new skill.",
    tier=BlockTier.OPEN,
    content="You are a knowledge engineer who turns raw source material into concise, reusable skills.",
)

ROLE_CHAT = BlockDefinition(
    id="role_chat",
    name="Role: Assistant",
    description="Persona for interactive question answering.",
    tier=BlockTier.OPEN,
    content="You are an assistant that answers questions using the organization's skill library.",
)

TONE_GUIDE = BlockDefinition(
    id="tone_guide",
    name="Tone",
    description="Voice and register of answers.",
    tier=BlockTier.OPEN,
    content="Write in a clear, direct, professional tone. Avoid marketing language.",
)

CORE_BLOCKS = (
    SOURCE_FIDELITY,
    JSON_OUTPUT,
    CITATION_FORMAT,
    SCOPE_DEFINITION,
    CONFIDENCE_LEVELS,
    ROLE_SKILL_CREATION,
    ROLE_CHAT,
    TONE_GUIDE,
)

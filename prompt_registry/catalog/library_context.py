# prompt_registry/catalog/library_context.py
# Default context injected when a composition is built for a given library.

LIBRARY_CONTEXT: dict[str, str] = {
    "knowledge": """LIBRARY: General Knowledge

- Focus on product capabilities, features and technical details
- Include version numbers and release information when available
- Keep internal controls and customer-facing features in separate sections""",
    "it": """LIBRARY: IT Support

- Name applications and systems explicitly
- Capture error codes, symptoms and diagnostic steps
- Write resolution steps as an ordered, actionable sequence""",
    "gtm": """LIBRARY: Go-to-Market

- Note industry vertical and deal stage relevance
- Capture competitor positioning and objection handling
- Prefer patterns that apply across several customers""",
    "prompts": """LIBRARY: Prompts

- Document the prompt's use case and target model
- List required and optional variables""",
}

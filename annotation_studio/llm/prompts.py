"""
Prompts sent to the external model.
"""

EXTRACTION_PROMPT: str = """
You are a Named Entity Recognition (NER) system specialized in parsing resumes.
Extract the following entities from the text:
- Name (The candidate's full name)
- Email (Email address)
- Skills (List of technical or professional skills)
- Organization (Companies worked for)
- Education (Universities or degrees)
- Location (City, Country)

Return the result as a JSON object with these keys.
For list items (Skills, Organization, Education), return arrays of strings.
If an entity is not found, return null or empty array.
"""

SUGGESTION_PROMPT: str = """
You are a data annotator. Identify spans of text in the resume corresponding to these labels:
- NAME
- EMAIL
- SKILL
- ORG (Organization/Company)
- EDU (Education/University)
- LOC (Location)

Return a JSON object with a single key "annotations": a list of objects with
- "label": the label name (one of the above)
- "text": the exact text substring found

IMPORTANT: "text" must match the content of the resume exactly, character for character.
"""


def build_contents(prompt: str, text: str) -> str:
    """Join the instruction prompt and the resume text into one request body."""
    return f"{prompt.strip()}\n\nRESUME TEXT:\n{text}"

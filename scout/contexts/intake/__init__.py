"""
Intake Context

Responsibilities:
- Reads Jekyll pages (YAML frontmatter + markdown body) from text, files, or a site tree
- Normalizes text and extracts structural signals (headings, code blocks, tables, chips, callouts)
- Splits body text into positioned segments (title, hero, headings, paragraphs, code comments)

Owns: Page parsing logic
Never: Scores evidence or makes classification decisions
"""

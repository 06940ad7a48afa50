"""
SCOUT - Signal-based Content Observation and Understanding Toolkit

Context engine for a Jekyll consulting/portfolio site. Reads markdown pages,
weighs the evidence they carry, and publishes a confidence-scored context
object per page for templates to consume.

Architecture:
- Intake Context: Page ingestion, frontmatter parsing, structural signal extraction
- Detection Context: Evidence scoring, taxonomy classification, tech stack validation,
  navigation variant selection
- Publishing Context: Unified page context assembly and Jekyll data file output
"""

__version__ = "0.1.0"

"""
Detection Context

Responsibilities:
- Holds the evidence model (position weights, source weights, confidence transform)
- Loads taxonomy, tech catalog and navigation rules tables
- Scores every taxonomy with one generic scorer and selects labels
- Validates declared tech stacks against usage evidence
- Selects the navigation variant for a page URL

Owns: Classification logic and rules tables
Never: Reads page files or writes published output
"""

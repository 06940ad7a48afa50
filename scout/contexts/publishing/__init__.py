"""
Publishing Context

Responsibilities:
- Resolves engine configuration (packaged defaults + Jekyll _config.yml + site _scout.yml)
- Assembles the unified page context (static, dynamic, semantic, target)
- Classifies whole sites and writes the Jekyll data file and summary report

Owns: Context engine, site runs, published output
Never: Changes detection scoring or parses page markup itself
"""

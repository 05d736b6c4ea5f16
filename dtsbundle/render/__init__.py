"""
Rendering: turn a collected entry point into declaration file text.

Components:
    - render_output(): Default renderer (banner, references, imports,
      statements, renamed exports, UMD namespace)
    - render_imports(), render_statement(): Building blocks, usable from a
      custom renderer

Any callable taking an EntryBundle and returning text can be passed to
generate_dts_bundle() as the renderer.
"""

from dtsbundle.render.output import render_imports, render_output, render_statement

__all__ = [
    "render_imports",
    "render_output",
    "render_statement",
]

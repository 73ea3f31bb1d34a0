"""Folio static site generator.

This package builds a static blog-and-portfolio site from a directory of
article files. Each article starts with a YAML front-matter block (id, title,
tags, difficulty, related topics, ...) followed by a Markdown, HTML or plain
text body.

The main entry point is the CLI module, which provides commands for scaffolding
new projects, building and checking sites, and running the development server.

Pipeline (one way, no runtime state):
- content: discover and read raw article documents.
- frontmatter: split and validate the metadata block.
- renderers: turn article bodies into HTML.
- assembler: build tag/difficulty indexes and resolve related topics.
- templates/feeds/build: render pages and write the output directory.
"""

__all__ = ["__version__"]
__version__ = "0.3.0"

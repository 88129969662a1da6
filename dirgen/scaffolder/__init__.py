"""DirGen scaffolder -- writes starter definition files.

Quick usage::

    from dirgen.scaffolder import write_template

    write_template("products.xml")
"""

from dirgen.scaffolder.templates import TemplateRenderer, write_template

__all__ = [
    "TemplateRenderer",
    "write_template",
]

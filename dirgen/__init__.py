"""DirGen -- generates directory trees from declarative definition files.

A definition lists folders and files, and may use ``$Token`` names that
expand into one sibling per configured value::

    from dirgen.pipeline import DirectoryGenerator

    result = DirectoryGenerator(on_progress=print).run("layout.xml")
    print(result.output_root)
"""

__version__ = "1.0.0"

"""Built-in CLI sub-commands for wprest.

* :mod:`~wprest.commands.inspect` -- examine the namespaces, resources,
  generated methods and setter conflicts a routes dictionary compiles to.
"""

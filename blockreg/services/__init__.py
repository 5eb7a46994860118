"""
Services behind the blockreg commands.

Publishing lives in the publish/ subpackage, process execution in
execution/.
"""

"""
Optional integrations for the dispatch machine.

The pydantic adapter is imported from its own module so that the core package
works without pydantic installed:

    from statedispatch.extensions.pydantic_schema import PydanticSchema
"""

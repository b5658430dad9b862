from dbprovider.utils import logging, module_loader, schema, serializers, type_guards

__all__ = ("logging", "module_loader", "schema", "serializers", "type_guards")

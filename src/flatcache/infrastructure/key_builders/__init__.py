"""Cache key resolvers."""

from flatcache.infrastructure.key_builders.template import KeyTemplateResolver

__all__ = ["KeyTemplateResolver"]

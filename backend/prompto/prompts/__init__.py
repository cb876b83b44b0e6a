"""Prompt definitions, codec and lifecycle manager"""

from prompto.prompts.models import PromptDefinition, PromptRecord, PromptUpdate
from prompto.prompts.codec import TemplateCodec, template_codec

__all__ = ['PromptDefinition', 'PromptRecord', 'PromptUpdate', 'TemplateCodec', 'template_codec']

from authn_widget.render.dispatcher import GENERAL_ERROR, STATUS_TEMPLATE_KEYS, RenderDispatcher
from authn_widget.render.mount import HtmlMount
from authn_widget.render.templates import TemplateLoader

__all__ = ["GENERAL_ERROR", "STATUS_TEMPLATE_KEYS", "HtmlMount", "RenderDispatcher", "TemplateLoader"]

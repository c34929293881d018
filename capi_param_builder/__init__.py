"""capi-param-builder: _fbc / _fbp cookie token builder"""

from capi_param_builder.version import __version__
from capi_param_builder.config import ParamBuilderConfig
from capi_param_builder.models import CookieSettings, FbcParamConfig, RequestContext
from capi_param_builder.param_builder import ParamBuilder, process
from capi_param_builder.processing.domain_resolver import PublicSuffixResolver

__all__ = [
    "__version__",
    "CookieSettings",
    "FbcParamConfig",
    "ParamBuilder",
    "ParamBuilderConfig",
    "PublicSuffixResolver",
    "RequestContext",
    "process",
]

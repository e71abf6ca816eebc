"""k1s0 grayrelease library."""

from .config import GrayReleaseConfig, LogSection, RuleEndpointSection, load
from .evaluator import is_target_user
from .exceptions import GrayReleaseError, GrayReleaseErrorCodes
from .gray_release import GrayRelease
from .interceptor import GrayNavigationPort
from .logger import configure_logging
from .models import (
    AllAreas,
    AreaFilter,
    GrayRule,
    GrayVersionRecord,
    NavigationRequest,
    PageEntry,
    SpecificCodes,
    UserInfo,
)
from .navigation import InMemoryNavigator, NavigationPort, PageStack
from .paths import (
    format_query,
    is_gray_page,
    join_query,
    resolve_url,
    split_query,
    strip_gray_prefix,
    with_gray_prefix,
)
from .redirect import GrayRedirector
from .rule_source import GrayRuleSource, HttpRuleFetcher, InMemoryRuleFetcher, RuleFetcher
from .session import GrayReleaseSession
from .storage import InMemoryKeyValueStorage, KeyValueStorage
from .store import GrayVersionStore

__all__ = [
    "AllAreas",
    "AreaFilter",
    "GrayNavigationPort",
    "GrayRedirector",
    "GrayRelease",
    "GrayReleaseConfig",
    "GrayReleaseError",
    "GrayReleaseErrorCodes",
    "GrayReleaseSession",
    "GrayRule",
    "GrayRuleSource",
    "GrayVersionRecord",
    "GrayVersionStore",
    "HttpRuleFetcher",
    "InMemoryKeyValueStorage",
    "InMemoryNavigator",
    "InMemoryRuleFetcher",
    "KeyValueStorage",
    "LogSection",
    "NavigationPort",
    "NavigationRequest",
    "PageEntry",
    "PageStack",
    "RuleEndpointSection",
    "RuleFetcher",
    "SpecificCodes",
    "UserInfo",
    "configure_logging",
    "format_query",
    "is_gray_page",
    "is_target_user",
    "join_query",
    "load",
    "resolve_url",
    "split_query",
    "strip_gray_prefix",
    "with_gray_prefix",
]

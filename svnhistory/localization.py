# -----------------------------------------------------------------------------
# Copyright (C) 2025 Iliyas Jorio.
# This file is part of SvnHistory, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

# The host editor owns the UI language. It hands us a locale directory and
# a list of preferred languages; catalogs are plain gettext '.mo' files
# under <localeDir>/<lang>/LC_MESSAGES/svnhistory.mo.

import gettext

from svnhistory.appconsts import APP_SYSTEM_NAME

TRANSLATION_DOMAIN = APP_SYSTEM_NAME.removesuffix("_testmode")

_translator: gettext.NullTranslations = gettext.NullTranslations()


def installGettextTranslator(localeDir: str = "", languages: list[str] | None = None) -> bool:
    """
    Load the message catalog for the first available language in `languages`.

    Return True if a catalog was found. Otherwise, fall back to
    American English and return False.
    """

    global _translator

    if localeDir:
        _translator = gettext.translation(TRANSLATION_DOMAIN, localeDir, languages, fallback=True)
    else:
        _translator = gettext.NullTranslations()

    return type(_translator) is not gettext.NullTranslations


def _(message: str, *args, **kwargs) -> str:
    message = _translator.gettext(message)
    if args or kwargs:
        message = message.format(*args, **kwargs)
    return message


def _n(singular: str, plural: str, n: int, *args, **kwargs) -> str:
    return _translator.ngettext(singular, plural, n).format(*args, **kwargs, n=n)


__all__ = [
    "_",
    "_n",
    "installGettextTranslator",
]

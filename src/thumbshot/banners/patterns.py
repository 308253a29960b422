"""Banner and overlay dismissal rules.

The catalog is ordered by priority: age gates first, then cookie consent
variants, then generic modals, GDPR notices and newsletter popups. Selectors are
either plain CSS selectors or :class:`TextMatch` pairs (structural selector plus
a case-sensitive substring of the element's text content).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Union

BannerAction = Literal["click", "remove"]


@dataclass(frozen=True, slots=True)
class TextMatch:
    selector: str
    text: str

    def describe(self) -> str:
        return f'{self.selector} >> text*="{self.text}"'


Selector = Union[str, TextMatch]


@dataclass(frozen=True, slots=True)
class BannerPattern:
    name: str
    selectors: tuple[Selector, ...]
    action: BannerAction = "click"
    wait_after_ms: Optional[int] = None


def describe_selector(selector: Selector) -> str:
    return selector.describe() if isinstance(selector, TextMatch) else selector


def _btn(*texts: str, tag: str = "button") -> tuple[TextMatch, ...]:
    return tuple(TextMatch(tag, t) for t in texts)


BANNER_PATTERNS: tuple[BannerPattern, ...] = (
    BannerPattern(
        name="Adult Site Age Verification",
        selectors=(
            TextMatch("button", "I am 18 or older - Enter"),
            TextMatch("a", "I am 18 or older - Enter"),
            TextMatch("button", "I am 18 or older"),
            TextMatch("a", "I am 18 or older"),
            TextMatch("button", "Enter Site"),
            TextMatch("a", "Enter Site"),
            TextMatch("button", "Enter"),
            TextMatch("a", "Enter"),
            ".agegate-enter",
            ".age-verification-enter",
            '[class*="agegate"] button',
            '[class*="agegate"] a',
            '[class*="age-verification"] button',
            '[class*="age-verification"] a',
            '[href*="enter"]',
            '[onclick*="enter"]',
            '[data-action*="enter"]',
        ),
        wait_after_ms=3000,
    ),
    BannerPattern(
        name="Cookie Accept All",
        selectors=(
            'button[id*="accept"]',
            'button[class*="accept"]',
            *_btn(
                "Accept all",
                "Alle akzeptieren",
                "Alle Cookies akzeptieren",
                "Cookies verwenden",
                "Accepter tout",
                "Aceptar todo",
                "Accetta tutto",
            ),
            '[data-testid*="accept"]',
            '[aria-label*="accept"]',
            ".cookie-accept",
            "#cookie-accept",
            ".accept-cookies",
            "#accept-cookies",
            ".consent-accept",
            "#consent-accept",
        ),
        wait_after_ms=1000,
    ),
    BannerPattern(
        name="German Cookie Accept",
        selectors=(
            *_btn(
                "Alle Cookies akzeptieren",
                "Cookies verwenden",
                "Cookies akzeptieren",
                "Alle akzeptieren",
                "Einverstanden",
                "Zustimmen",
                "Cookies zulassen",
                "Alle zulassen",
            ),
            TextMatch('[data-action*="accept"]', "Cookies"),
            TextMatch('[onclick*="accept"]', "Cookies"),
            TextMatch(".cookie-button", "akzeptieren"),
            TextMatch(".consent-button", "akzeptieren"),
        ),
        wait_after_ms=1000,
    ),
    BannerPattern(
        name="Cookie OK/Agree",
        selectors=(
            *_btn(
                "OK",
                "Agree",
                "I agree",
                "Zustimmen",
                "Einverstanden",
                "D'accord",
                "De acuerdo",
                "Sono d'accordo",
            ),
            ".cookie-ok",
            "#cookie-ok",
            ".agree-button",
            "#agree-button",
        ),
        wait_after_ms=1000,
    ),
    BannerPattern(
        name="Age Verification - 18+",
        selectors=(
            *_btn(
                "I am 18 or older",
                "I am 18 or older - Enter",
                "Enter",
                "Yes, I am 18+",
                "I am over 18",
                "Ich bin 18 oder älter",
                "J'ai 18 ans ou plus",
                "Tengo 18 años o más",
                "Ho 18 anni o più",
            ),
            TextMatch("a", "I am 18 or older"),
            TextMatch("a", "I am 18 or older - Enter"),
            TextMatch("a", "Enter"),
            TextMatch('[href*="enter"]', "18"),
            TextMatch('[href*="enter"]', "older"),
            '[data-testid*="age-verify"]',
            '[data-testid*="enter-site"]',
            ".age-verify-enter",
            "#age-verify-enter",
            ".enter-site",
            "#enter-site",
            TextMatch("*", "I am 18 or older - Enter"),
            TextMatch("*", "I am 18 or older"),
            ".agegate button",
            ".age-verification button",
            TextMatch('[class*="age"] button', "Enter"),
            TextMatch('[class*="age"] a', "Enter"),
        ),
        wait_after_ms=2000,
    ),
    BannerPattern(
        name="YouTube Cookie Accept",
        selectors=(
            'button[aria-label*="Accept the use of cookies"]',
            TextMatch("button", "Alle akzeptieren"),
            TextMatch("button", "Accept all"),
            'ytd-button-renderer button[aria-label*="Accept"]',
            '[data-testid="accept-button"]',
            TextMatch("ytd-button-renderer button", "Alle akzeptieren"),
            TextMatch("ytd-button-renderer button", "Accept all"),
            TextMatch("c3-material-button", "Alle akzeptieren"),
            TextMatch("c3-material-button", "Accept all"),
            TextMatch('[role="button"]', "Alle akzeptieren"),
            TextMatch('[role="button"]', "Accept all"),
            TextMatch("button[jsname]", "Alle akzeptieren"),
            TextMatch("button[jsname]", "Accept all"),
        ),
        wait_after_ms=1500,
    ),
    BannerPattern(
        name="Modal Close",
        selectors=(
            'button[aria-label="Close"]',
            'button[aria-label="Schließen"]',
            'button[aria-label="Fermer"]',
            'button[aria-label="Cerrar"]',
            'button[aria-label="Chiudi"]',
            ".modal-close",
            ".close-modal",
            ".popup-close",
            ".overlay-close",
            '[data-dismiss="modal"]',
        ),
        wait_after_ms=500,
    ),
    BannerPattern(
        name="GDPR Accept",
        selectors=(
            *_btn(
                "Accept and continue",
                "Akzeptieren und fortfahren",
                "Accepter et continuer",
                "Aceptar y continuar",
                "Accetta e continua",
            ),
            ".gdpr-accept",
            "#gdpr-accept",
            ".privacy-accept",
            "#privacy-accept",
        ),
        wait_after_ms=1000,
    ),
    BannerPattern(
        name="Newsletter Close",
        selectors=(
            *_btn(
                "No thanks",
                "Maybe later",
                "Skip",
                "Nein danke",
                "Später",
                "Non merci",
                "Plus tard",
                "No gracias",
                "Más tarde",
                "No grazie",
                "Più tardi",
            ),
            ".newsletter-close",
            ".subscription-close",
            ".popup-dismiss",
        ),
        wait_after_ms=500,
    ),
)

BLOCKING_CSS = """
[id*="cookie-banner"],
[class*="cookie-banner"],
[id*="cookie-notice"],
[class*="cookie-notice"],
[id*="gdpr-banner"],
[class*="gdpr-banner"],
[id*="consent-banner"],
[class*="consent-banner"],
[id*="privacy-banner"],
[class*="privacy-banner"],
.cookie-bar,
.gdpr-bar,
.consent-bar,
.privacy-bar,
.newsletter-popup,
.subscription-popup,
.age-verification-overlay,
.modal-backdrop,
.overlay-backdrop {
    display: none !important;
    visibility: hidden !important;
    opacity: 0 !important;
    z-index: -9999 !important;
}

body {
    overflow: auto !important;
}
"""


__all__ = [
    "BANNER_PATTERNS",
    "BLOCKING_CSS",
    "BannerAction",
    "BannerPattern",
    "Selector",
    "TextMatch",
    "describe_selector",
]

"""
Faker providers and factories for people, addresses and browsing context.

Two custom providers extend Faker:
- DigitalMarketingProvider: UTM parameters, ad click ids and referrer URLs
- WebUserAgentProvider: device, OS, browser and user-agent strings

Both draw from the Faker instance's own random generator, so
`Faker.seed_instance` makes them reproducible.
"""

from datetime import date
from typing import Dict, List, Optional, Tuple

from faker import Faker
from faker.providers import BaseProvider

from apps.datagen.src.core.randomness import RandomVariates
from libs.models.events import (
    Address,
    Browser,
    BrowserEnabled,
    Country,
    Customer,
    Device,
    OnlineCustomer,
    UserContext,
)

UNITED_STATES = Country(code="US", name="United States")

_CLICK_ID_CHARS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"


class DigitalMarketingProvider(BaseProvider):
    utm_sources = (
        "google", "facebook", "twitter", "linkedin", "instagram", "youtube",
        "tiktok", "pinterest", "reddit", "bing", "newsletter", "email",
        "affiliate", "partner", "referral", "direct", "qr_code", "sms",
    )
    utm_mediums = (
        "cpc", "ppc", "paid_search", "organic_search", "organic_social",
        "paid_social", "display", "banner", "email", "newsletter",
        "affiliate", "referral", "video", "cpm", "native", "retargeting",
        "social", "push_notification", "sms", "influencer",
    )
    campaign_types = (
        "spring_sale", "summer_promo", "fall_campaign", "winter_deals",
        "black_friday", "cyber_monday", "holiday_sale", "new_year",
        "back_to_school", "easter_promo", "mothers_day", "fathers_day",
        "product_launch", "brand_awareness", "lead_gen", "webinar",
        "ebook_download", "free_trial", "demo_request", "newsletter_signup",
        "retargeting", "abandoned_cart", "customer_retention", "upsell",
        "cross_sell", "referral_program", "loyalty_rewards",
    )
    utm_contents = (
        "hero_banner", "sidebar_ad", "footer_link", "header_cta", "popup",
        "exit_intent", "inline_text", "button_primary", "button_secondary",
        "image_ad", "video_ad", "carousel_1", "carousel_2", "carousel_3",
        "featured_product", "bestseller", "new_arrival", "clearance",
        "testimonial", "case_study", "blog_post", "landing_page",
        "version_a", "version_b", "control", "variant_1", "variant_2",
    )
    utm_terms = (
        "best", "cheap", "affordable", "premium", "luxury", "discount",
        "sale", "deal", "offer", "coupon", "free", "online", "buy",
        "shop", "order", "near_me", "review", "compare", "vs", "alternative",
    )
    referrer_domains = (
        "google.com", "facebook.com", "twitter.com", "linkedin.com",
        "instagram.com", "youtube.com", "reddit.com", "pinterest.com",
        "tiktok.com", "bing.com", "yahoo.com", "duckduckgo.com",
    )
    referrer_paths = ("/search", "/feed", "/discover", "/trending", "/home", "")

    def utm_source(self) -> str:
        roll = self.random_int(0, 99)
        if roll < 30:
            return "google"
        if roll < 50:
            return "facebook"
        if roll < 60:
            return "email"
        if roll < 70:
            return "twitter"
        if roll < 75:
            return "linkedin"
        if roll < 80:
            return "instagram"
        return self.random_element(self.utm_sources)

    def utm_medium(self, source: Optional[str] = None) -> str:
        source = (source or "").lower()
        if source in ("google", "bing"):
            return "cpc" if self.generator.random.random() < 0.5 else "organic_search"
        if source in ("facebook", "instagram", "twitter", "linkedin", "tiktok", "pinterest"):
            return "paid_social" if self.generator.random.random() < 0.5 else "organic_social"
        if source in ("email", "newsletter"):
            return "email"
        if source in ("affiliate", "referral"):
            return source
        return self.random_element(self.utm_mediums)

    def utm_campaign(self) -> str:
        year = date.today().year
        prefixes = [f"{year}_q{quarter}" for quarter in range(1, 5)] + [
            "jan", "feb", "mar", "apr", "may", "jun",
            "jul", "aug", "sep", "oct", "nov", "dec",
        ]
        return f"{self.random_element(prefixes)}_{self.random_element(self.campaign_types)}"

    def utm_content(self) -> str:
        return self.random_element(self.utm_contents)

    def utm_term(self) -> str:
        return self.random_element(self.utm_terms)

    def _token(self, chars: str, length: int) -> str:
        return "".join(self.generator.random.choice(chars) for _ in range(length))

    def gclid(self) -> str:
        prefix = self.random_element(("Cj0KCQiA", "EAIaIQob", "CjwKCAjw"))
        return prefix + self._token(_CLICK_ID_CHARS + "-_", 20)

    def fbclid(self) -> str:
        prefix = self.random_element(("IwAR", "IwZX", "IwY"))
        return prefix + self._token(_CLICK_ID_CHARS + "-_", 24)

    def msclkid(self) -> str:
        return self._token(_CLICK_ID_CHARS, 22)

    def ttclid(self) -> str:
        return self._token(_CLICK_ID_CHARS, 28)

    def click_id_param(self, source: str) -> Optional[Tuple[str, str]]:
        """(param name, click id) for ad platforms that tag clicks, else None."""
        source = source.lower()
        if source in ("google", "bing"):
            return "gclid", self.gclid()
        if source in ("facebook", "instagram"):
            return "fbclid", self.fbclid()
        if source == "microsoft":
            return "msclkid", self.msclkid()
        if source == "tiktok":
            return "ttclid", self.ttclid()
        return None

    def utm_params(self, with_click_id: bool = False) -> Dict[str, str]:
        source = self.utm_source()
        medium = self.utm_medium(source)
        params = {
            "utm_source": source,
            "utm_medium": medium,
            "utm_campaign": self.utm_campaign(),
            "utm_content": self.utm_content(),
        }
        if medium in ("cpc", "ppc", "paid_search"):
            params["utm_term"] = self.utm_term()
        if with_click_id:
            click_id = self.click_id_param(source)
            if click_id is not None:
                params[click_id[0]] = click_id[1]
        return params

    def marketing_query_string(self, with_click_id: bool = False) -> str:
        return "&".join(f"{key}={value}" for key, value in self.utm_params(with_click_id).items())

    def referrer_url(self) -> str:
        domain = self.random_element(self.referrer_domains)
        return f"https://{domain}{self.random_element(self.referrer_paths)}"


class WebUserAgentProvider(BaseProvider):
    desktop_os = (
        "Windows 10", "Windows 11", "macOS 13.0", "macOS 14.0", "macOS 15.0",
        "Ubuntu 22.04", "Ubuntu 24.04", "Fedora 38", "Debian 12",
    )
    mobile_os = ("Android 13", "Android 14", "Android 15", "iOS 16.0", "iOS 17.0", "iOS 18.0")
    tablet_os = ("Android 13", "Android 14", "iPadOS 16.0", "iPadOS 17.0", "iPadOS 18.0")
    desktop_browsers = ("Chrome", "Firefox", "Safari", "Edge", "Opera", "Brave")
    mobile_browsers = (
        "Chrome Mobile", "Safari Mobile", "Samsung Internet", "Firefox Mobile", "Opera Mobile",
    )
    desktop_resolutions = (
        "1920x1080", "2560x1440", "3840x2160", "1680x1050", "1366x768",
        "1440x900", "2560x1600", "3440x1440", "1600x900", "1280x720",
    )
    mobile_resolutions = (
        "390x844", "393x851", "412x915", "360x800", "414x896",
        "375x812", "428x926", "393x873", "412x892", "360x780",
    )
    tablet_resolutions = (
        "1024x768", "2048x1536", "1280x800", "2560x1600", "2224x1668",
        "2388x1668", "2732x2048", "1200x1920", "1600x2560",
    )
    browser_versions = {
        "Chrome": ("119.0.0.0", "120.0.0.0", "121.0.0.0", "122.0.0.0", "123.0.0.0"),
        "Firefox": ("120.0", "121.0", "122.0", "123.0", "124.0"),
        "Safari": ("16.6", "17.0", "17.1", "17.2", "17.3", "17.4"),
        "Edge": ("119.0.0.0", "120.0.0.0", "121.0.0.0", "122.0.0.0"),
    }

    def device_type(self) -> str:
        roll = self.random_int(0, 99)
        if roll < 50:
            return "Desktop"
        if roll < 90:
            return "Mobile"
        return "Tablet"

    def device_os(self, device_type: str) -> str:
        if device_type == "Mobile":
            return self.random_element(self.mobile_os)
        if device_type == "Tablet":
            return self.random_element(self.tablet_os)
        return self.random_element(self.desktop_os)

    def browser_name(self, device_type: str) -> str:
        if device_type in ("Mobile", "Tablet"):
            return self.random_element(self.mobile_browsers)
        return self.random_element(self.desktop_browsers)

    def browser_version(self, browser: str) -> str:
        for family in ("Chrome", "Firefox", "Safari", "Edge"):
            if family in browser:
                return self.random_element(self.browser_versions[family])
        return self.random_element(self.browser_versions["Chrome"])

    def screen_resolution(self, device_type: str) -> str:
        if device_type == "Mobile":
            return self.random_element(self.mobile_resolutions)
        if device_type == "Tablet":
            return self.random_element(self.tablet_resolutions)
        return self.random_element(self.desktop_resolutions)

    def web_user_agent(self, device_type: str, os_name: str, browser: str, version: str) -> str:
        parts: List[str] = ["Mozilla/5.0"]
        release = os_name.split(" ")[-1]

        if device_type == "Desktop":
            if os_name.startswith("Windows"):
                parts.append("(Windows NT 10.0; Win64; x64)")
            elif os_name.startswith("macOS"):
                parts.append("(Macintosh; Intel Mac OS X 10_15_7)")
            elif os_name.split(" ")[0] in ("Ubuntu", "Debian", "Fedora"):
                parts.append("(X11; Linux x86_64)")
        elif device_type == "Mobile":
            if os_name.startswith("Android"):
                parts.append(f"(Linux; Android {release}; SM-G991B)")
            elif os_name.startswith("iOS"):
                parts.append(f"(iPhone; CPU iPhone OS {release.replace('.', '_')} like Mac OS X)")
        elif device_type == "Tablet":
            if os_name.startswith("Android"):
                parts.append(f"(Linux; Android {release}; SM-T870)")
            elif os_name.startswith("iPadOS"):
                parts.append(f"(iPad; CPU OS {release.replace('.', '_')} like Mac OS X)")

        webkit = "AppleWebKit/537.36 (KHTML, like Gecko)"
        if "Chrome" in browser:
            suffix = " Mobile Safari/537.36" if browser == "Chrome Mobile" else " Safari/537.36"
            parts.append(f"{webkit} Chrome/{version}{suffix}")
        elif "Firefox" in browser:
            parts.append(f"Gecko/20100101 Firefox/{version}")
        elif "Safari" in browser:
            if browser == "Safari Mobile":
                tail = f"Version/{version} Mobile/15E148 Safari/604.1"
            else:
                tail = f"Version/{version} Safari/605.1.15"
            parts.append(f"AppleWebKit/605.1.15 (KHTML, like Gecko) {tail}")
        elif "Edge" in browser:
            parts.append(f"{webkit} Chrome/{version} Safari/537.36 Edg/{version}")
        elif "Brave" in browser:
            parts.append(f"{webkit} Chrome/{version} Safari/537.36")
        elif "Samsung" in browser:
            parts.append(f"{webkit} SamsungBrowser/23.0 Chrome/115.0.0.0 Mobile Safari/537.36")
        elif "Opera" in browser:
            parts.append(f"{webkit} Chrome/{version} Safari/537.36 OPR/105.0.0.0")

        return " ".join(parts)

    def javascript_enabled(self) -> bool:
        return self.random_int(0, 99) < 99

    def cookies_enabled(self) -> bool:
        return self.random_int(0, 99) < 98

    def do_not_track(self) -> bool:
        return self.random_int(0, 99) < 25


def build_faker(locale: str = "en_US", seed: Optional[int] = None) -> Faker:
    """
    Create a Faker instance with the datagen providers registered.

    Args:
        locale: Faker locale.
        seed: Optional per-instance seed.
    """
    fake = Faker(locale)
    if seed is not None:
        fake.seed_instance(seed)
    fake.add_provider(DigitalMarketingProvider)
    fake.add_provider(WebUserAgentProvider)
    return fake


def new_customer(fake: Faker, rng: RandomVariates) -> Customer:
    return Customer(id=rng.uuid(), name=fake.name())


def new_online_customer(fake: Faker, rng: RandomVariates, min_emails: int, max_emails: int) -> OnlineCustomer:
    """
    Customer with a username-derived first email and extra random ones.
    """
    first, last = fake.first_name(), fake.last_name()
    username = f"{first}.{last}".lower().replace(" ", "").replace("'", "")
    emails = [f"{username}@{fake.safe_domain_name()}"]
    for _ in range(1, rng.random_int(min_emails, max_emails)):
        emails.append(fake.safe_email())
    return OnlineCustomer(id=rng.uuid(), name=f"{first} {last}", emails=emails)


def new_address(
    fake: Faker,
    rng: RandomVariates,
    min_phones: int,
    max_phones: int,
    city: Optional[str] = None,
) -> Address:
    phone_count = rng.random_int(min_phones, max_phones)
    phones = [fake.phone_number() for _ in range(phone_count)] if phone_count > 0 else None
    return Address(
        number=int(fake.building_number()),
        street=fake.street_name(),
        city=city or fake.city(),
        zipcode=fake.zipcode(),
        country=UNITED_STATES,
        phones=phones,
    )


def new_user_context(fake: Faker) -> UserContext:
    device_type = fake.device_type()
    os_name = fake.device_os(device_type)
    browser = fake.browser_name(device_type)
    version = fake.browser_version(browser)
    return UserContext(
        device=Device(
            type=device_type,
            os=os_name,
            resolution=fake.screen_resolution(device_type),
        ),
        browser=Browser(
            name=browser,
            version=version,
            useragent=fake.web_user_agent(device_type, os_name, browser, version),
            enabled=BrowserEnabled(
                cookies=fake.cookies_enabled(),
                javascript=fake.javascript_enabled(),
            ),
        ),
        ipaddress=fake.ipv4_public(),
        donottrack=fake.do_not_track(),
    )

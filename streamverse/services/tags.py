"""
Category tag classification.
A channel's category string may hold several ';'-separated tags mixing topical
categories ("News") and countries ("India"). Each token is classified once per
distinct category string.
"""
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

CATEGORY_DELIMITER = ";"


class TagKind(str, Enum):
    CATEGORY = "category"
    COUNTRY = "country"


COUNTRY_NAMES = frozenset(name.lower() for name in [
    "Afghanistan", "Albania", "Algeria", "Andorra", "Angola", "Argentina", "Armenia", "Aruba",
    "Australia", "Austria", "Azerbaijan", "Bahamas", "Bahrain", "Bangladesh", "Barbados",
    "Belarus", "Belgium", "Belize", "Benin", "Bhutan", "Bolivia", "Bosnia and Herzegovina",
    "Botswana", "Brazil", "Brunei", "Bulgaria", "Burkina Faso", "Burundi", "Cambodia",
    "Cameroon", "Canada", "Cape Verde", "Chad", "Chile", "China", "Colombia", "Comoros",
    "Congo", "Costa Rica", "Croatia", "Cuba", "Curacao", "Cyprus", "Czech Republic", "Czechia",
    "Denmark", "Djibouti", "Dominica", "Dominican Republic", "Ecuador", "Egypt", "El Salvador",
    "Equatorial Guinea", "Eritrea", "Estonia", "Ethiopia", "Fiji", "Finland", "France",
    "Gabon", "Gambia", "Georgia", "Germany", "Ghana", "Greece", "Grenada", "Guatemala",
    "Guinea", "Guyana", "Haiti", "Honduras", "Hong Kong", "Hungary", "Iceland", "India",
    "Indonesia", "Iran", "Iraq", "Ireland", "Israel", "Italy", "Ivory Coast", "Jamaica",
    "Japan", "Jordan", "Kazakhstan", "Kenya", "Kosovo", "Kuwait", "Kyrgyzstan", "Laos",
    "Latvia", "Lebanon", "Lesotho", "Liberia", "Libya", "Liechtenstein", "Lithuania",
    "Luxembourg", "Macau", "Madagascar", "Malawi", "Malaysia", "Maldives", "Mali", "Malta",
    "Mauritania", "Mauritius", "Mexico", "Moldova", "Monaco", "Mongolia", "Montenegro",
    "Morocco", "Mozambique", "Myanmar", "Namibia", "Nepal", "Netherlands", "New Zealand",
    "Nicaragua", "Niger", "Nigeria", "North Korea", "North Macedonia", "Norway", "Oman",
    "Pakistan", "Palestine", "Panama", "Papua New Guinea", "Paraguay", "Peru", "Philippines",
    "Poland", "Portugal", "Puerto Rico", "Qatar", "Romania", "Russia", "Rwanda",
    "Saint Lucia", "San Marino", "Saudi Arabia", "Senegal", "Serbia", "Seychelles",
    "Sierra Leone", "Singapore", "Slovakia", "Slovenia", "Somalia", "South Africa",
    "South Korea", "South Sudan", "Spain", "Sri Lanka", "Sudan", "Suriname", "Sweden",
    "Switzerland", "Syria", "Taiwan", "Tajikistan", "Tanzania", "Thailand", "Togo",
    "Trinidad and Tobago", "Tunisia", "Turkey", "Turkmenistan", "Uganda", "Ukraine",
    "United Arab Emirates", "United Kingdom", "United States", "Uruguay", "Uzbekistan",
    "Vatican City", "Venezuela", "Vietnam", "Yemen", "Zambia", "Zimbabwe",
    # Common short forms
    "USA", "US", "UK", "UAE", "Korea", "England", "Scotland", "Wales", "Great Britain",
    "Holland", "America", "KSA", "DRC",
])


@dataclass(frozen=True)
class ChannelTags:
    categories: tuple[str, ...] = ()
    countries: tuple[str, ...] = ()

    def bucket(self, kind: TagKind) -> tuple[str, ...]:
        return self.countries if kind == TagKind.COUNTRY else self.categories

    def has(self, kind: TagKind, value: str) -> bool:
        value = value.strip().lower()
        return any(tag.lower() == value for tag in self.bucket(kind))


def classify_token(token: str) -> TagKind:
    return TagKind.COUNTRY if token.strip().lower() in COUNTRY_NAMES else TagKind.CATEGORY


@lru_cache(maxsize=4096)
def classify_tags(category: str) -> ChannelTags:
    """Split a category string into deduplicated topical and country tags."""
    categories: list[str] = []
    countries: list[str] = []
    seen: set[str] = set()

    for token in (category or "").split(CATEGORY_DELIMITER):
        token = token.strip()
        if not token or token.lower() in seen:
            continue
        seen.add(token.lower())
        if classify_token(token) == TagKind.COUNTRY:
            countries.append(token)
        else:
            categories.append(token)

    return ChannelTags(categories=tuple(categories), countries=tuple(countries))

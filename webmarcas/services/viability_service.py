"""Brand viability pre-check.

Only the offline part of the check lives here: the well-known mark screen and
the NCL class suggestion by business area.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from webmarcas.core.exceptions import ValidationError
from webmarcas.utils.validators import normalize_name

logger = logging.getLogger(__name__)

SIMILARITY_THRESHOLD = 85
SOUNDEX_MIN_LENGTH = 4

FAMOUS_BRANDS: tuple[str, ...] = (
    # sports
    "Nike", "Adidas", "Puma", "Reebok", "New Balance", "Asics", "Mizuno", "Under Armour",
    "Vans", "Converse", "Fila",
    # food and beverage
    "Coca-Cola", "Pepsi", "Red Bull", "Heineken", "Budweiser", "Ambev", "Brahma", "Skol",
    "Antarctica", "Nestlé", "Danone", "Unilever",
    # technology
    "Apple", "Google", "Microsoft", "Amazon", "Samsung", "Sony", "LG", "Intel", "IBM",
    "Dell", "HP", "Lenovo", "Asus", "Acer", "AMD", "Nvidia", "Oracle", "Cisco", "Qualcomm",
    # automotive
    "Tesla", "Toyota", "Honda", "BMW", "Mercedes-Benz", "Mercedes", "Audi", "Volkswagen",
    "Ferrari", "Lamborghini", "Porsche", "Ford", "Chevrolet", "Hyundai", "Kia", "Fiat",
    "Renault", "Peugeot", "Citroen", "Jeep", "Land Rover", "Mitsubishi", "Volvo", "Subaru",
    # media
    "Netflix", "Disney", "Pixar", "Marvel", "DC", "Warner", "Universal", "Paramount",
    "Spotify", "YouTube", "Globo", "Record", "SBT",
    # social and apps
    "TikTok", "Instagram", "Facebook", "WhatsApp", "Telegram", "LinkedIn", "Twitter", "X",
    "Snapchat", "Pinterest", "Uber", "iFood", "99", "Rappi",
    # finance
    "Visa", "Mastercard", "American Express", "PayPal", "Itaú", "Bradesco", "Santander",
    "Banco do Brasil", "Caixa", "Nubank", "XP", "PicPay", "Stone", "PagSeguro", "Cielo",
    # fast food
    "McDonald's", "McDonalds", "Burger King", "KFC", "Subway", "Starbucks", "Pizza Hut",
    "Domino's", "Dominos", "Habib's", "Habibs", "Outback", "Bob's", "Bobs",
    # retail
    "Shopee", "AliExpress", "Alibaba", "eBay", "Walmart", "Carrefour", "Mercado Livre",
    "MercadoLivre", "Magazine Luiza", "Magalu", "Casas Bahia",
    # luxury
    "Rolex", "Cartier", "Louis Vuitton", "Gucci", "Prada", "Chanel", "Dior", "Versace",
    "Hermès", "Burberry", "Tiffany", "Armani", "Zara", "H&M",
    # telecom
    "Claro", "Vivo", "TIM",
    # beauty
    "O Boticário", "Boticário", "Natura", "Avon", "L'Oréal", "Loreal", "Pantene",
    # energy
    "Petrobras", "Shell", "BP", "Exxon",
    # other
    "Ray-Ban", "Rayban", "Oakley", "JBL", "Bose", "Beats", "Swarovski", "Pandora",
    "Philips", "Panasonic", "Braun", "Gillette", "Johnson", "Johnson & Johnson",
    "Pfizer", "Bayer", "Siemens", "Bosch", "Caterpillar",
)

SOUNDEX_CODES = {
    **dict.fromkeys("bfpv", "1"),
    **dict.fromkeys("cgjkqsxz", "2"),
    **dict.fromkeys("dt", "3"),
    "l": "4",
    **dict.fromkeys("mn", "5"),
    "r": "6",
}


@dataclass(frozen=True)
class NclSuggestion:
    keywords: tuple[str, ...]
    classes: tuple[int, ...]
    descriptions: tuple[str, ...]


NCL_BY_AREA: tuple[NclSuggestion, ...] = (
    NclSuggestion(
        ("tecnologia", "software", "app", "ti"),
        (9, 42, 35),
        (
            "Classe 09 – Aparelhos e instrumentos científicos, software, hardware e equipamentos eletrônicos",
            "Classe 42 – Serviços científicos, tecnológicos e de design, desenvolvimento de software",
            "Classe 35 – Publicidade, gestão de negócios, administração comercial",
        ),
    ),
    NclSuggestion(
        ("alimentacao", "restaurante", "comida", "gastronomia"),
        (43, 30, 29),
        (
            "Classe 43 – Serviços de restaurante, alimentação e hospedagem",
            "Classe 30 – Café, chá, cacau, açúcar, arroz, massas, pães, doces e condimentos",
            "Classe 29 – Carne, peixe, aves, caça, frutas, legumes, ovos, leite e derivados",
        ),
    ),
    NclSuggestion(
        ("moda", "roupa", "vestuario", "boutique"),
        (25, 18, 35),
        (
            "Classe 25 – Vestuário, calçados e chapelaria",
            "Classe 18 – Couro, bolsas, malas, guarda-chuvas e artigos de selaria",
            "Classe 35 – Publicidade, gestão de negócios, comércio varejista",
        ),
    ),
    NclSuggestion(
        ("saude", "clinica", "hospital", "medic"),
        (44, 5, 10),
        (
            "Classe 44 – Serviços médicos, veterinários, higiênicos e de beleza",
            "Classe 05 – Produtos farmacêuticos, veterinários e sanitários",
            "Classe 10 – Aparelhos e instrumentos médicos, cirúrgicos e odontológicos",
        ),
    ),
    NclSuggestion(
        ("educacao", "escola", "curso", "ensino"),
        (41, 16, 9),
        (
            "Classe 41 – Educação, treinamento, entretenimento e atividades desportivas e culturais",
            "Classe 16 – Papel, produtos de papelaria, material de instrução e ensino",
            "Classe 09 – Aparelhos para gravação, transmissão ou reprodução de som ou imagem",
        ),
    ),
    NclSuggestion(
        ("beleza", "salao", "estetica", "cosmetico"),
        (44, 3, 35),
        (
            "Classe 44 – Serviços de salão de beleza, estética e cabeleireiro",
            "Classe 03 – Cosméticos, perfumaria, óleos essenciais e produtos de higiene",
            "Classe 35 – Publicidade e comércio de produtos de beleza",
        ),
    ),
    NclSuggestion(
        ("construcao", "obra", "engenharia", "arquitetura"),
        (37, 19, 6),
        (
            "Classe 37 – Construção civil, reparação e serviços de instalação",
            "Classe 19 – Materiais de construção não metálicos (cimento, tijolo, vidro)",
            "Classe 06 – Metais comuns e suas ligas, materiais de construção metálicos",
        ),
    ),
    NclSuggestion(
        ("financeiro", "banco", "investimento", "credito"),
        (36, 35, 42),
        (
            "Classe 36 – Seguros, negócios financeiros, imobiliários e bancários",
            "Classe 35 – Gestão de negócios, administração comercial e contabilidade",
            "Classe 42 – Serviços científicos e tecnológicos relacionados a finanças",
        ),
    ),
    NclSuggestion(
        ("advocacia", "advogado", "juridico", "direito"),
        (45, 35, 41),
        (
            "Classe 45 – Serviços jurídicos, advocacia e consultoria legal",
            "Classe 35 – Gestão de negócios e administração de escritórios",
            "Classe 41 – Educação jurídica, palestras e treinamentos",
        ),
    ),
    NclSuggestion(
        ("automotivo", "carro", "oficina", "mecanica"),
        (37, 12, 35),
        (
            "Classe 37 – Reparação e manutenção de veículos",
            "Classe 12 – Veículos, aparelhos de locomoção por terra, ar ou água",
            "Classe 35 – Comércio de veículos e peças automotivas",
        ),
    ),
)

DEFAULT_NCL = NclSuggestion(
    (),
    (35, 41, 42),
    (
        "Classe 35 – Publicidade, gestão de negócios e administração comercial",
        "Classe 41 – Educação, treinamento, entretenimento e cultura",
        "Classe 42 – Serviços científicos, tecnológicos e de pesquisa",
    ),
)


@dataclass(frozen=True)
class FamousBrandMatch:
    brand: str
    similarity: int


@dataclass
class ViabilityResult:
    level: str
    title: str
    description: str
    classes: list[int] = field(default_factory=list)
    class_descriptions: list[str] = field(default_factory=list)
    famous_brand_match: FamousBrandMatch | None = None


def levenshtein_distance(a: str, b: str) -> int:
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            if char_a == char_b:
                current.append(previous[j - 1])
            else:
                current.append(1 + min(previous[j], current[j - 1], previous[j - 1]))
        previous = current
    return previous[-1]


def levenshtein_similarity(a: str, b: str) -> float:
    if not a and not b:
        return 1.0
    return 1 - levenshtein_distance(a, b) / max(len(a), len(b))


def soundex_pt(value: str) -> str:
    """Four-character phonetic code tuned for Portuguese spellings."""
    compact = normalize_name(value).replace(" ", "")
    if not compact:
        return ""
    code = compact[0].upper()
    previous = SOUNDEX_CODES.get(compact[0], "0")
    for char in compact[1:]:
        if len(code) >= 4:
            break
        if char in "aeiouyhw":
            previous = "0"
            continue
        digit = SOUNDEX_CODES.get(char, "0")
        if digit != "0" and digit != previous:
            code += digit
            previous = digit
    return code.ljust(4, "0")


def check_famous_brand(brand_name: str) -> FamousBrandMatch | None:
    normalized = normalize_name(brand_name)
    if len(normalized) < 2:
        return None

    for famous in FAMOUS_BRANDS:
        famous_normalized = normalize_name(famous)
        if not famous_normalized:
            continue
        if normalized == famous_normalized:
            return FamousBrandMatch(famous, 100)

        similarity = levenshtein_similarity(normalized, famous_normalized) * 100
        if similarity >= SIMILARITY_THRESHOLD:
            return FamousBrandMatch(famous, round(similarity))

        if len(normalized) >= SOUNDEX_MIN_LENGTH and len(famous_normalized) >= SOUNDEX_MIN_LENGTH:
            if soundex_pt(normalized) == soundex_pt(famous_normalized):
                return FamousBrandMatch(famous, 88)
    return None


def _keyword_hit(keyword: str, area: str) -> bool:
    # short keywords ("ti", "app") only count as whole words
    if len(keyword) <= 3:
        return re.search(rf"\b{keyword}\b", area) is not None
    return keyword in area


def suggest_classes(business_area: str) -> NclSuggestion:
    area = normalize_name(business_area)
    for suggestion in NCL_BY_AREA:
        if any(_keyword_hit(keyword, area) for keyword in suggestion.keywords):
            return suggestion
    return DEFAULT_NCL


class ViabilityService:
    def check_viability(self, brand_name: str | None, business_area: str | None) -> ViabilityResult:
        brand = (brand_name or "").strip()
        area = (business_area or "").strip()
        if not brand or not area:
            raise ValidationError(
                "Nome da marca e ramo de atividade são obrigatórios.",
                field_errors={
                    key: ["Obrigatório."]
                    for key, value in (("brand_name", brand), ("business_area", area))
                    if not value
                },
            )

        match = check_famous_brand(brand)
        if match is not None:
            logger.info(
                "viability.famous_brand",
                extra={"event": "viability.famous_brand", "brand": brand, "matched": match.brand, "similarity": match.similarity},
            )
            return ViabilityResult(
                level="blocked",
                title="Marca de Alto Renome - Não Disponível",
                description=(
                    f'A marca "{brand}" é similar ou idêntica a "{match.brand}", que possui proteção especial '
                    "em todas as classes no Brasil (Art. 125 Lei 9.279/1996)."
                ),
                famous_brand_match=match,
            )

        suggestion = suggest_classes(area)
        logger.info(
            "viability.checked",
            extra={"event": "viability.checked", "brand": brand, "classes": list(suggestion.classes)},
        )
        return ViabilityResult(
            level="high",
            title="Alta Viabilidade",
            description="Boa viabilidade de registro identificada.",
            classes=list(suggestion.classes),
            class_descriptions=list(suggestion.descriptions),
        )

"""Built-in site content and the catalog item factory."""

from __future__ import annotations

import uuid
from typing import Any

from vitrine.content.models import CatalogItem, CollectionSection, SiteContent

PLACEHOLDER_IMAGE = "https://images.unsplash.com/photo-1550614000-4b9519e02a15?q=80&w=1000"
PLACEHOLDER_DESCRIPTION = "Uma nova adição exclusiva à coleção H&R GRIFES."

_UNSPLASH = "https://images.unsplash.com/{photo}?q=80&w=1000&auto=format&fit=crop"

DEFAULT_DOCUMENT: dict[str, Any] = {
    "theme": {
        "primary": "#D4AF37",
        "background": "#0F0F10",
        "secondary": "#8A2BE2",
    },
    "hero": {
        "subtitle": "Drop Imersivo",
        "title": "H&R GRIFES",
        "description": '"Moda que te envolve"',
        "buttonText": "Descobrir",
    },
    "marquee": {
        "brandName": "H&R GRIFES",
        "text1": "Drop Imersivo",
        "text2": "Moda que te envolve",
        "year": "2025",
    },
    "story": {
        "titlePrefix": "A",
        "titleHighlight": "Narrativa",
        "description": (
            "Explore os elementos que definem nossa coleção mais recente. "
            "Cada fio tem um propósito, cada corte conta uma história."
        ),
        "items": [
            {
                "id": "1",
                "title": "Narrativa Textural",
                "category": "Materiais",
                "subtitle": "Tecido Silk-flow com microplissados.",
                "image": _UNSPLASH.format(photo="photo-1528459061998-56fd57ad86e3"),
                "description": (
                    "Nossos tecidos são escolhidos para contar uma história de "
                    "resiliência e elegância. Esta temporada apresenta seda "
                    "tecnológica reciclada que se move como metal líquido."
                ),
            },
            {
                "id": "2",
                "title": "Cortes Arquitetônicos",
                "category": "Silhueta",
                "subtitle": "Ombros estruturados encontrando drapeados fluidos.",
                "image": _UNSPLASH.format(photo="photo-1515886657613-9f3515b0c78f"),
                "description": (
                    "O corpo é a tela. Usamos alfaiataria arquitetônica afiada "
                    "para emoldurar a forma humana, criando silhuetas de poder "
                    "para a era moderna."
                ),
            },
            {
                "id": "3",
                "title": "Cor Viva",
                "category": "Paleta",
                "subtitle": "Violetas Profundos e Ouro Polido.",
                "image": _UNSPLASH.format(photo="photo-1550614000-4b9519e02a15"),
                "description": (
                    "Cores que respiram. Nossa paleta é inspirada na transição "
                    "do crepúsculo para a noite elétrica da cidade."
                ),
            },
        ],
    },
    "lookbook": {
        "label": "Lookbook 2025",
        "titleLine1": "Elegância",
        "titleLine2": "Urbana",
        "description": (
            "H&R GRIFES traz uma coleção desenhada para os holofotes. Da sala "
            "de reuniões à abertura da galeria, estas peças adaptam-se à sua "
            "narrativa."
        ),
        "features": [
            {"title": "Seda Sustentável", "desc": "Fonte ética, incrivelmente macia."},
            {"title": "Ajuste Sob Medida", "desc": "Serviços sob medida disponíveis."},
        ],
        "items": [
            {
                "id": "4",
                "title": "O Blazer Noir",
                "category": "Look 01",
                "subtitle": "Caimento oversized com detalhes em metais dourados.",
                "image": _UNSPLASH.format(photo="photo-1539008835657-9e8e9680c956"),
                "description": (
                    "Uma peça essencial redefinida. O Blazer Noir apresenta "
                    "ombro caído e botões de fecho dourados assinatura H&R."
                ),
            },
            {
                "id": "5",
                "title": "Vestido Etéreo",
                "category": "Look 02",
                "subtitle": "Camadas translúcidas com fio metálico.",
                "image": _UNSPLASH.format(photo="photo-1566174053879-31528523f8ae"),
                "description": (
                    "Para os momentos que importam. Este vestido captura cada "
                    "fóton de luz, criando uma aura pessoal de brilho."
                ),
            },
            {
                "id": "6",
                "title": "Urban Shell",
                "category": "Look 03",
                "subtitle": "Casaco resistente à água em violeta fosco.",
                "image": _UNSPLASH.format(photo="photo-1529139574466-a302d2052574"),
                "description": (
                    "Função encontra alta moda. O Urban Shell é projetado para "
                    "o andarilho da cidade que se recusa a comprometer o estilo."
                ),
            },
        ],
    },
    "rsvp": {
        "label": "Lista de Convidados",
        "title": "Garanta Seu Acesso",
        "description": (
            "Junte-se a nós para a revelação imersiva. Capacidade limitada "
            "disponível para esta experiência exclusiva."
        ),
        "successTitle": "Você está na lista.",
        "successMessage": "Enviamos uma confirmação para o seu e-mail.",
    },
}

DEFAULT_CONTENT = SiteContent.model_validate(DEFAULT_DOCUMENT)


def default_content() -> SiteContent:
    """Return a fresh copy of the built-in content."""
    return DEFAULT_CONTENT.model_copy(deep=True)


def new_item_id() -> str:
    return uuid.uuid4().hex


def new_catalog_item(
    collection: CollectionSection,
    title: str,
    subtitle: str,
    *,
    category: str = "",
    image: str = "",
    description: str = "",
    **extra: Any,
) -> CatalogItem:
    """Build a catalog item ready to be appended to ``collection``.

    Blank optional fields fall back to the same placeholders the add-item
    form uses: ``Look 0N`` for the category, a stock image and a generic
    description.  Extra keyword arguments (e.g. ``price``) are kept on the
    item as passthrough fields.
    """
    return CatalogItem(
        id=new_item_id(),
        title=title,
        subtitle=subtitle,
        category=category or f"Look 0{len(collection.items) + 1}",
        image=image or PLACEHOLDER_IMAGE,
        description=description or PLACEHOLDER_DESCRIPTION,
        **extra,
    )

from __future__ import annotations

from langchain_core.prompts import ChatPromptTemplate


def build_keyword_prompt() -> ChatPromptTemplate:
    """Return ChatPromptTemplate extracting cuisine and location terms from a food query."""

    system_message = (
        "You extract search keywords from food and restaurant queries written by users in Malaysia. "
        "Queries mix English, Malay, Chinese dialects and local slang (tapau, kopitiam, mamak). "
        "Respond ONLY with a JSON object, no extra text. "
        "If nothing relevant is present, return an empty object.\n\n"
        "Shape:\n"
        "{{\n"
        '  "cuisine": "main cuisine mentioned or null",\n'
        '  "location": "address or city mentioned or null",\n'
        '  "relevantTerms": {{\n'
        '    "cuisineTypes": ["cuisine names"],\n'
        '    "location": {{"address": "street/mall/landmark", "city": "city", '
        '"district": "district", "area": "area"}},\n'
        '    "establishments": ["restaurant, hawker stall, food truck ..."],\n'
        '    "services": ["delivery, takeaway, dine in ..."]\n'
        "  }}\n"
        "}}"
    )

    return ChatPromptTemplate.from_messages(
        [
            ("system", system_message),
            ("user", "Query: {text}"),
        ]
    )


def build_region_prompt() -> ChatPromptTemplate:
    """Return ChatPromptTemplate classifying a Malaysian place reference."""

    system_message = (
        "You are a Malaysian geography expert with extensive knowledge of landmarks, shopping malls, "
        "districts, and streets in major Malaysian cities. "
        "Identify any location mentioned in the user's text and classify its type accurately. "
        "Respond ONLY with JSON:\n"
        "{{\n"
        '  "location": "the main city this belongs to",\n'
        '  "confidence": "confidence score between 0 and 1",\n'
        '  "context": {{\n'
        '    "state": "state name",\n'
        '    "country": "Malaysia",\n'
        '    "locationType": "one of: mall, city, district, street, landmark, area",\n'
        '    "isCity": false,\n'
        '    "district": "district or area name",\n'
        '    "area": "specific area or neighborhood",\n'
        '    "landmarks": ["relevant landmarks or points of interest"],\n'
        '    "alternateNames": ["common alternate names"]\n'
        "  }}\n"
        "}}\n\n"
        "Examples:\n"
        '- "midvalley" -> {{"location": "Kuala Lumpur", "confidence": 0.95, "context": '
        '{{"state": "Federal Territory of Kuala Lumpur", "country": "Malaysia", "locationType": "mall", '
        '"isCity": false, "district": "Bangsar", "area": "Mid Valley City", '
        '"landmarks": ["Mid Valley Megamall", "The Gardens Mall"], '
        '"alternateNames": ["mv", "mid valley megamall"]}}}}\n'
        '- "ttdi" -> {{"location": "Kuala Lumpur", "confidence": 0.95, "context": '
        '{{"state": "Federal Territory of Kuala Lumpur", "country": "Malaysia", "locationType": "district", '
        '"isCity": false, "district": "Taman Tun Dr Ismail", "area": "TTDI", "landmarks": [], '
        '"alternateNames": ["taman tun", "taman tun dr ismail"]}}}}\n'
        '- "jalan telawi" -> {{"location": "Kuala Lumpur", "confidence": 0.95, "context": '
        '{{"state": "Federal Territory of Kuala Lumpur", "country": "Malaysia", "locationType": "street", '
        '"isCity": false, "district": "Bangsar", "area": "Telawi", '
        '"landmarks": ["Bangsar Village", "Bangsar Village II"], "alternateNames": ["telawi street"]}}}}'
    )

    return ChatPromptTemplate.from_messages(
        [
            ("system", system_message),
            ("user", "Text: {text}"),
        ]
    )


def build_cuisine_prompt() -> ChatPromptTemplate:
    """Return ChatPromptTemplate identifying the cuisine and dish type of a food item."""

    system_message = (
        "You are a culinary expert with deep knowledge of global cuisines. "
        "Consider cultural context, ingredients, and preparation methods in your analysis. "
        "Respond ONLY with JSON:\n"
        "{{\n"
        '  "cuisineType": "identified cuisine or null if uncertain",\n'
        '  "dishType": "identified dish type or null if uncertain",\n'
        '  "confidence": "confidence score between 0 and 1"\n'
        "}}"
    )

    user_template = (
        'Given the food item or dish name "{text}", identify:\n'
        "1. The cuisine type (e.g., Japanese, Chinese, Malaysian, etc.)\n"
        "2. The type of dish (e.g., main course, appetizer, dessert, etc.)"
    )

    return ChatPromptTemplate.from_messages(
        [
            ("system", system_message),
            ("user", user_template),
        ]
    )

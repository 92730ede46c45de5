from __future__ import annotations

"""Label and copy tables shared by the catalog helpers, the search UI and the site build.

Kept in one place so the preview server and the static pages never drift
apart on wording.
"""

CATEGORY_LABELS = {
    "shade": "🏠 Shade & Shelter",
    "lighting": "💡 Lighting",
    "comfort": "🛋️ Comfort",
    "power": "⚡ Power & Tech",
    "cooling": "❄️ Cooling",
    "storage": "📦 Storage",
}

DIFFICULTY_LABELS = {
    "beginner": "🌱 Beginner",
    "intermediate": "🌿 Intermediate",
    "advanced": "🌳 Advanced",
}

BUILD_TYPES = ["functional", "extravagant"]

# Shown when a search comes back empty
SEARCH_HINTS = [
    "shade",
    "lighting",
    "cooling",
]

STAGE_META = {
    "main": {
        "title": "DIY Festival Projects - JamCamping",
        "description": (
            "Browse legendary DIY festival projects. From shade structures to "
            "LED totems, find your next epic build."
        ),
    },
    "vendor": {
        "title": "Cosmic Knowledge Shop - Festival Guides | JamCamping",
        "description": (
            "Digital guides and books for creating legendary festival campsites. "
            "Written by heads for heads."
        ),
    },
    "chill": {
        "title": "About JamCamping - Digital Shakedown Street",
        "description": (
            "Learn about JamCamping's mission to help festival goers create "
            "legendary campsites with DIY projects."
        ),
    },
    "submit": {
        "title": "Submit Your Project - JamCamping Community",
        "description": "Share your legendary campsite hack or DIY build with the JamCamping community.",
    },
    "contact": {
        "title": "Contact JamCamping - Festival DIY Community",
        "description": "Contact JamCamping for collaborations, suggestions, or festival vibes.",
    },
}

# (priority, changefreq) for stage fragments in sitemap.xml; "main" is the site root
STAGE_SITEMAP = {
    "main": ("1.0", "weekly"),
    "vendor": ("0.8", "monthly"),
    "chill": ("0.6", "monthly"),
    "submit": ("0.7", "monthly"),
    "contact": ("0.5", "monthly"),
}

PROJECT_SITEMAP = ("0.8", "monthly")
SHOP_SITEMAP = ("0.7", "monthly")

# "Surprise me" quotes
INSPIRATIONS = [
    "The magic happens when preparation meets opportunity - and a really cool campsite!",
    "Your campsite is your canvas - paint it with creativity and festival spirit!",
    "Every great festival memory starts with an epic basecamp.",
    "Build it, and the good vibes will come.",
    "In the desert of ordinary camping, be an oasis of awesome.",
    "Once in a while you get shown the light, in the strangest of places if you look at it right.",
    "What a long, strange trip it's been... and it's about to get even better!",
    "Keep on truckin' with the coolest camp on the playa!",
    "Sometimes the light's all shinin' on me, other times I can barely see...",
    "We're just walking each other home - might as well make the journey legendary!",
]

SURPRISE_KINDS = ["project", "inspiration", "stage"]

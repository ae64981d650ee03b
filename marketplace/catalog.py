CATEGORIES = [
    {"id": 1, "name": "Haircuts", "icon": "💇‍♂️"},
    {"id": 2, "name": "Home Repairs", "icon": "🔧"},
    {"id": 3, "name": "Cleaning", "icon": "🧹"},
    {"id": 4, "name": "Gardening", "icon": "🌱"},
    {"id": 5, "name": "Personal Training", "icon": "💪"},
    {"id": 6, "name": "Pet Care", "icon": "🐾"},
]

CITIES = ["Mumbai", "Pune", "Bangalore"]

# Evaluation criteria for the outstanding student award.
# Seeded once into an empty database; weights are filled in by the AHP step.
default_criteria = [
    {"name": "Academic", "description": "Report card and exam results"},
    {"name": "Behavior", "description": "Conduct and discipline at school"},
    {"name": "Achievement", "description": "Competition and extracurricular achievements"},
    {"name": "Leadership", "description": "Leadership in class and school organizations"},
    {"name": "Attendance", "description": "Presence during the school year"},
]

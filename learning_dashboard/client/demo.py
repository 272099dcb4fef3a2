"""Demo data shown before login and whenever live data cannot be loaded."""

DEMO_DASHBOARD = {
    "name": "Demo User",
    "email": "demo@example.com",
    "role": "user",
    "avatar": "/placeholder.svg?height=80&width=80",
    "resumeScore": 7.5,
    "xpPoints": 65,
    "isAdmin": False,
    "quizScores": [7.2, 8.5, 9.0, 8.7, 9.5, 7.8],
    "quizNames": [
        "JavaScript Basics",
        "React Fundamentals",
        "Node.js Intro",
        "Database Design",
        "API Development",
        "Testing",
    ],
    "skillMatches": {
        "JavaScript": 75,
        "React": 65,
        "Node.js": 55,
        "Python": 50,
        "Data Analysis": 60,
    },
    "skillsLearned": [
        {"name": "JavaScript", "level": 75, "completed": True},
        {"name": "React", "level": 65, "completed": True},
        {"name": "Node.js", "level": 55, "completed": False},
        {"name": "Python", "level": 50, "completed": False},
        {"name": "Data Analysis", "level": 60, "completed": False},
    ],
    "learningPath": [
        {"month": "Jan", "progress": 10},
        {"month": "Feb", "progress": 25},
        {"month": "Mar", "progress": 40},
        {"month": "Apr", "progress": 55},
        {"month": "May", "progress": 65},
        {"month": "Jun", "progress": 65},
    ],
    "achievements": [
        {"name": "First Login", "date": "Jan 15"},
        {"name": "Profile Setup", "date": "Feb 22"},
        {"name": "First Quiz", "date": "Mar 10"},
        {"name": "Skill Unlocked", "date": "Apr 5"},
    ],
}

DEMO_ACTIVITY = [
    {"name": "Sarah L.", "action": "Completed React Quiz", "time": "2 min ago"},
    {"name": "John D.", "action": "Earned JavaScript Badge", "time": "5 min ago"},
    {"name": "Maria G.", "action": "Started Python Course", "time": "12 min ago"},
]

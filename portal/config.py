import os


# System Configuration Settings
class SystemConfig:
    SECRET_KEY = os.environ.get('PORTAL_SECRET_KEY', 'dev-secret-key')
    LOG_LEVEL = os.environ.get('PORTAL_LOG_LEVEL', 'INFO')

    # JSON endpoints only; forms validate request data, not browser posts
    WTF_CSRF_ENABLED = False

    # Database
    MONGO_URI = os.environ.get('PORTAL_MONGO_URI', 'mongodb://localhost:27017/')
    DB_NAME = os.environ.get('PORTAL_DB_NAME', 'ucaes_portal')

    # Fraction of the annual fee that must be paid before course registration opens
    REGISTRATION_THRESHOLD = float(os.environ.get('PORTAL_REGISTRATION_THRESHOLD', 0.70))

    # Seconds a cached catalog/program read stays fresh
    CACHE_TTL = int(os.environ.get('PORTAL_CACHE_TTL', 300))

    CURRENCY_SYMBOL = 'GH¢'

    # 2025/2026 fee structure as per official notice.
    # Regular: two semester installments (50/50). Weekend: three trimester installments (40/30/30).
    FEE_STRUCTURES = {
        'Regular': {
            '100': {'total': 6950.00, 'installments': [3475.00, 3475.00]},
            '200': {'total': 6100.00, 'installments': [3050.00, 3050.00]},
            '300': {'total': 6400.00, 'installments': [3200.00, 3200.00]},
            '400': {'total': 6100.00, 'installments': [3050.00, 3050.00]},
        },
        'Weekend': {
            '100': {'total': 8250.00, 'installments': [3300.00, 2475.00, 2475.00]},
            '200': {'total': 7400.00, 'installments': [2960.00, 2220.00, 2220.00]},
            '300': {'total': 7700.00, 'installments': [3080.00, 2310.00, 2310.00]},
            '400': {'total': 7400.00, 'installments': [2960.00, 2220.00, 2220.00]},
        },
    }

    # Grade component caps: continuous assessment, mid-semester, final exam
    COMPONENT_LIMITS = {
        'assessment': 10,
        'midsem': 20,
        'exams': 70,
    }

    # Minimum total for each letter grade, highest first
    GRADE_CUTOFFS = [
        ('A', 80),
        ('B+', 75),
        ('B', 70),
        ('C+', 65),
        ('C', 60),
        ('D+', 55),
        ('D', 50),
        ('E', 45),
        ('F', 0),
    ]

    GRADE_POINTS = {
        'A': 4.0,
        'B+': 3.5,
        'B': 3.0,
        'C+': 2.5,
        'C': 2.0,
        'D+': 1.5,
        'D': 1.0,
        'E': 0.5,
        'F': 0.0,
    }

    PASSING_GRADES = ['A', 'B+', 'B', 'C+', 'C', 'D+', 'D']

    # (minimum GPA, label), highest first
    CLASS_STANDINGS = [
        (3.6, 'First Class'),
        (3.0, 'Second Class Upper'),
        (2.0, 'Second Class Lower'),
        (1.0, 'Third Class'),
        (0.0, 'Pass'),
    ]

    ACADEMIC_STATUSES = [
        (3.0, 'Good Standing'),
        (2.0, 'Satisfactory'),
        (0.0, 'Probation'),
    ]

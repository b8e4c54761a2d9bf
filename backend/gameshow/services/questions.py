"""Default question bank seeded into an empty store."""

DEFAULT_QUESTIONS = [
    # General
    {
        'category': 'General',
        'text': 'What is the capital of France?',
        'answer': 'Paris',
        'choices': ['London', 'Paris', 'Berlin', 'Madrid'],
        'points': 100,
    },
    {
        'category': 'General',
        'text': 'How many continents are there?',
        'answer': '7',
        'choices': ['5', '6', '7', '8'],
        'points': 100,
    },
    # Music
    {
        'category': 'Music',
        'text': 'Who is known as the King of Pop?',
        'answer': 'Michael Jackson',
        'choices': ['Elvis Presley', 'Michael Jackson', 'Prince', 'Madonna'],
        'points': 150,
    },
    {
        'category': 'Music',
        'text': "Which band released the album 'Abbey Road'?",
        'answer': 'The Beatles',
        'choices': ['The Rolling Stones', 'The Beatles', 'Led Zeppelin', 'Pink Floyd'],
        'points': 150,
    },
    # Movies
    {
        'category': 'Movies',
        'text': "Who directed 'Jurassic Park'?",
        'answer': 'Steven Spielberg',
        'choices': ['James Cameron', 'Steven Spielberg', 'George Lucas', 'Peter Jackson'],
        'points': 200,
    },
    {
        'category': 'Movies',
        'text': 'What is the name of the hobbit played by Elijah Wood?',
        'answer': 'Frodo Baggins',
        'choices': ['Bilbo Baggins', 'Frodo Baggins', 'Samwise Gamgee', 'Merry Brandybuck'],
        'points': 200,
    },
    # Science
    {
        'category': 'Science',
        'text': 'What is the chemical symbol for Gold?',
        'answer': 'Au',
        'choices': ['Go', 'Au', 'Gd', 'Ag'],
        'points': 250,
    },
    {
        'category': 'Science',
        'text': 'What planet is known as the Red Planet?',
        'answer': 'Mars',
        'choices': ['Venus', 'Mars', 'Jupiter', 'Saturn'],
        'points': 150,
    },
    # History
    {
        'category': 'History',
        'text': 'Who was the first President of the United States?',
        'answer': 'George Washington',
        'choices': ['Thomas Jefferson', 'George Washington', 'John Adams', 'Benjamin Franklin'],
        'points': 200,
    },
    {
        'category': 'History',
        'text': 'In which year did World War II end?',
        'answer': '1945',
        'choices': ['1943', '1944', '1945', '1946'],
        'points': 300,
    },
]

REASON_COUNT = 4
RECOMMENDATION_COUNT = 3


def reasons_prompt(movie):
    movie = _require_title(movie)
    system_message = (
        "You are a movie expert. The user likes a specific movie.\n"
        f"Provide exactly {REASON_COUNT} distinct, short reasons (max 10 words each) "
        "why someone might like this movie.\n"
        'Focus on unique "flavors" like atmosphere, intellectual challenge, '
        "or specific cast chemistry.\n"
        'Format as JSON with a "reasons" array.'
    )
    user_message = f'I like "{movie}". Why?'
    return system_message, user_message


def recommendations_prompt(movie, reason):
    movie = _require_title(movie)
    system_message = (
        f'You are a cinematic advisor. The user likes "{movie}" '
        f'specifically because of "{reason}".\n'
        f"Suggest {RECOMMENDATION_COUNT} movies they might like that share this specific quality.\n"
        'Prioritize "deep cuts" or less obvious choices.\n'
        'For each movie, provide: "title", "year", and a "why".\n'
        'Format as a JSON object with a "recommendations" array.'
    )
    return system_message, "Recommendations please."


def poster_prompt(title, year):
    return (
        f'A professional, high-quality cinematic movie poster for the film "{title}" ({year}). '
        "Minimalist graphic design, evocative atmosphere, artistic, cinematic lighting, "
        "4k resolution style. No crowded text."
    )


def _require_title(movie):
    if not movie or not movie.strip():
        raise ValueError("movie title must not be empty")
    return movie.strip()

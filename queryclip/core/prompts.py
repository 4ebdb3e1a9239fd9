selection_system_template = """
    You are a helpful video editor assistant. Given a transcript with timestamps
    and a user request, choose the most relevant short moments and return ONLY
    JSON: an array of objects with {{start, end}} in seconds.
    Keep total duration under ~{target_seconds} seconds if possible.
    """

selection_user_template = """Transcript (partial):
{transcript}

User request: {query}

Return JSON only: [{{"start": number, "end": number}}, ...]"""

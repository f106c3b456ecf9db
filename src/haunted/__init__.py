"""Haunted syllabus: chunked llm regeneration of course material"""

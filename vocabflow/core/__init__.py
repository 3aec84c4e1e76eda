"""
Core pipeline modules: chunking, LLM access, agents, processing and combining
"""

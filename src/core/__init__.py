"""Core domain package for spamscope.

Core contains scoring, rule caching, and reputation orchestration without any
Telegram, Lua, or storage-specific code, keeping the business logic portable.
"""

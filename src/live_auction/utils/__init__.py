"""Pure helpers shared by every layer"""

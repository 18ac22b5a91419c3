__version__ = "1.0.2"
__description__ = "hypershape : resource shaping and HATEOAS links for Flask APIs"

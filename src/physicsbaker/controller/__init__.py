"""
Controller layer: the bake engine (timelines, ramps, composition, splitting)
and the background workers that run it.
"""

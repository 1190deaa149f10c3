"""
Model layer: records, keyframes, motions, the rig model and file I/O.
"""

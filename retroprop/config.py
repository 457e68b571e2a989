"""config

Constantes par défaut du package.

Ce module centralise les valeurs utilisées par les algorithmes et par le
lanceur (pas de fichier de configuration externe).
"""

# ========================
# Algorithmes
# ========================
REGULARISATION_DEFAUT = 0.0

# Pas des différences finies (gradient numérique)
EPSILON_DEFAUT = 1e-4

# Écart max accepté entre gradient analytique et numérique
TOLERANCE_DEFAUT = 1e-6


# ========================
# Réseau
# ========================
POIDS_MIN = -0.5
POIDS_MAX = 0.5


# ========================
# Affichage
# ========================
PRECISION_AFFICHAGE = 6


# ========================
# Exemples intégrés (XOR)
# ========================
EXEMPLES_XOR = [
	([0.0, 0.0], [0.0]),
	([0.0, 1.0], [1.0]),
	([1.0, 0.0], [1.0]),
	([1.0, 1.0], [0.0]),
]

COUCHES_XOR = [2, 2, 1]

r"""fct_activation

Rôle
	Fonction d'activation sigmoïde (Fi) et sa dérivée (Fp).

	Le réseau et la rétropropagation ne traitent que des couches sigmoïdes:
	l'erreur de sortie `a - d` n'est le gradient exact du coût d'entropie
	croisée que pour une sortie sigmoïde.

Conventions
	- Les fonctions prennent en entrée une valeur scalaire `i` (pré-activation,
	  valeur *brute* d'un neurone).
	- `sigmoide_et_derivative` retourne une paire `[Fi, Fp]` afin d'être
	  directement déballable: `Fi, Fp = ...`.

Formules
	- $\sigma(i) = 1 / (1 + e^{-i})$
	- $\sigma'(i) = \sigma(i)\,(1-\sigma(i))$
"""

import math
from typing import List, Sequence


def _sigmoid_stable(x: float) -> float:
	"""Sigmoïde numériquement stable.

	Évite les overflows de exp() quand |x| est grand.
	"""
	xf = float(x)
	if xf >= 0.0:
		z = math.exp(-xf)
		return 1.0 / (1.0 + z)
	z = math.exp(xf)
	return z / (1.0 + z)


# ==================== sigmoide =========================
def sigmoide(activation_i: float) -> float:
	"""Fi = 1 / (1 + exp(-i))"""
	return _sigmoid_stable(activation_i)


# ==================== sigmoide_derivee =========================
def sigmoide_derivee(activation_i: float) -> float:
	"""Fp = Fi * (1 - Fi), évaluée sur la valeur brute i."""
	Fi = _sigmoid_stable(activation_i)
	return Fi * (1.0 - Fi)


# ==================== sigmoide_et_derivative =========================
def sigmoide_et_derivative(activation_i):
	"""Calcule la sigmoïde et sa dérivée.

	Sortie:
		[Fi, Fp] (liste de deux floats)
	"""

	Fi = _sigmoid_stable(float(activation_i))
	Fp = Fi * (1.0 - Fi)
	return [Fi, Fp]


# ==================== sigmoide_vecteur =========================
def sigmoide_vecteur(raw: Sequence[float]) -> List[float]:
	"""Applique la sigmoïde élément par élément."""
	return [_sigmoid_stable(i) for i in raw]


# ==================== derivee_vecteur =========================
def derivee_vecteur(raw: Sequence[float]) -> List[float]:
	"""Applique la dérivée de la sigmoïde élément par élément sur des valeurs brutes."""
	return [sigmoide_derivee(i) for i in raw]

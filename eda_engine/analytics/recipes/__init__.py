"""Independent EDA query recipes, discovered by ``registry``."""

"""
Static bilingual (English/Spanish) vocabulary used for deterministic matching.

Everything here is read-only after import. Keys are canonical lowercase
values; the lists hold the surface forms that map onto them.
"""
from typing import Dict, List

# Canonical color -> surface variants (standard, metallic, custom, two-tone).
# Order matters: the first color with a whole-word hit wins.
COLOR_VARIANTS: Dict[str, List[str]] = {
    'black': ['black', 'negro', 'negra', 'oscuro', 'oscura', 'midnight'],
    'white': ['white', 'blanco', 'blanca', 'polar', 'ivory', 'pearl', 'perla'],
    'red': ['red', 'rojo', 'roja', 'crimson', 'vermillion', 'scarlet', 'carmesí'],
    'navy': ['navy', 'navy blue', 'azul marino'],
    'blue': ['blue', 'azul', 'cobalt', 'celeste'],
    'green': ['green', 'verde', 'olive', 'jade', 'emerald', 'lime', 'forest', 'esmeralda'],
    'yellow': ['yellow', 'amarillo', 'amarilla', 'gold', 'oro', 'dorado', 'dorada'],
    'orange': ['orange', 'naranja', 'anaranjado', 'amber', 'ámbar'],
    'purple': ['purple', 'violet', 'púrpura', 'violeta', 'morado', 'morada', 'lavender', 'lavanda'],
    'pink': ['pink', 'rosa', 'rosado', 'rosada', 'fuchsia', 'magenta'],
    'brown': ['brown', 'café', 'marrón', 'marron', 'chocolate', 'tan', 'khaki', 'caqui'],
    'silver': ['silver', 'plata', 'plateado', 'plateada', 'argent'],
    'gray': ['gray', 'grey', 'gris'],
    'bronze': ['bronze', 'bronce'],
    'champagne': ['champagne', 'champán', 'champan'],
    'burgundy': ['burgundy', 'wine', 'vino', 'bordeaux', 'burdeos'],
    'teal': ['teal', 'turquoise', 'turquesa'],
    'cream': ['cream', 'crema', 'beige'],
    'charcoal': ['charcoal', 'carbon', 'carbón', 'graphite', 'grafito'],
    'two-tone': ['two-tone', 'two tone', 'bi-color', 'bicolor', 'dos colores', 'dos tonos'],
}

# Descriptor term -> canonical descriptor
COLOR_DESCRIPTORS: Dict[str, str] = {
    'metallic': 'metallic',
    'metálico': 'metallic',
    'metalico': 'metallic',
    'metálica': 'metallic',
    'matte': 'matte',
    'mate': 'matte',
    'gloss': 'glossy',
    'glossy': 'glossy',
    'brillante': 'glossy',
    'pearl': 'pearl',
    'perla': 'pearl',
    'iridescent': 'iridescent',
    'iridiscente': 'iridescent',
}

# Canonical color -> stored-text fragments searched in exterior/interior columns
COLOR_SEARCH_VARIATIONS: Dict[str, List[str]] = {
    'black': ['black', 'negro', 'negra'],
    'white': ['white', 'blanco', 'blanca'],
    'red': ['red', 'rojo', 'roja'],
    'blue': ['blue', 'azul'],
    'green': ['green', 'verde'],
    'yellow': ['yellow', 'amarillo', 'amarilla'],
    'orange': ['orange', 'naranja'],
    'purple': ['purple', 'morado', 'púrpura'],
    'pink': ['pink', 'rosa'],
    'brown': ['brown', 'café', 'marrón'],
    'gray': ['gray', 'grey', 'gris'],
    'silver': ['silver', 'plata', 'plateado'],
    'bronze': ['bronze', 'bronce'],
    'champagne': ['champagne', 'champán'],
    'burgundy': ['burgundy', 'wine', 'vino'],
    'teal': ['teal', 'turquoise', 'turquesa'],
    'cream': ['cream', 'crema', 'beige'],
    'navy': ['navy', 'marine', 'marino'],
    'charcoal': ['charcoal', 'carbon', 'carbón'],
    'two-tone': ['two-tone', 'two tone', 'bicolor', 'dos tonos'],
}

# Canonical brand -> aliases and frequent misspellings
BRAND_ALIASES: Dict[str, List[str]] = {
    'toyota': ['toyota'],
    'honda': ['honda'],
    'ford': ['ford'],
    'chevrolet': ['chevrolet', 'chevy'],
    'nissan': ['nissan', 'nisan'],
    'bmw': ['bmw', 'beemer'],
    'mercedes': ['mercedes', 'mercedes-benz', 'mercedes benz', 'mercedez', 'benz'],
    'audi': ['audi'],
    'hyundai': ['hyundai', 'hiunday', 'hyundae'],
    'kia': ['kia'],
    'mazda': ['mazda'],
    'lexus': ['lexus'],
    'jeep': ['jeep'],
    'volkswagen': ['volkswagen', 'vw'],
    'mitsubishi': ['mitsubishi'],
    'suzuki': ['suzuki'],
    'subaru': ['subaru'],
    'tesla': ['tesla'],
}

# Canonical brand -> known models
BRAND_MODELS: Dict[str, List[str]] = {
    'toyota': ['corolla', 'camry', 'rav4', 'hilux', 'tacoma', 'revo', 'prado', 'land cruiser', '4runner', 'yaris', 'prius'],
    'honda': ['civic', 'accord', 'cr-v', 'crv', 'pilot', 'fit', 'hr-v', 'odyssey'],
    'ford': ['fusion', 'mustang', 'explorer', 'f-150', 'f150', 'ranger', 'escape', 'edge'],
    'chevrolet': ['camaro', 'silverado', 'tahoe', 'equinox', 'malibu', 'spark', 'colorado', 'corvette'],
    'nissan': ['sentra', 'altima', 'frontier', 'pathfinder', 'x-trail', 'rogue', 'versa', 'leaf'],
    'bmw': ['x5', 'x3', 'x1', 'm3', 'm5', '320i', '330i', '530i'],
    'mercedes': ['c300', 'e350', 'gle', 'glc', 'c-class', 'e-class', 's-class', 'g-class'],
    'audi': ['a3', 'a4', 'a6', 'q5', 'q7'],
    'hyundai': ['tucson', 'elantra', 'sonata', 'santa fe', 'accent', 'creta'],
    'kia': ['sportage', 'sorento', 'rio', 'picanto', 'k5', 'seltos'],
    'mazda': ['cx-5', 'cx-9', 'cx-30', 'mazda3', 'mazda6', 'bt-50'],
    'lexus': ['rx', 'nx', 'es', 'is', 'gx', 'lx'],
    'jeep': ['wrangler', 'cherokee', 'grand cherokee', 'compass', 'renegade'],
    'volkswagen': ['jetta', 'golf', 'tiguan', 'passat', 'amarok'],
    'mitsubishi': ['lancer', 'outlander', 'montero', 'l200', 'mirage'],
    'suzuki': ['swift', 'vitara', 'jimny'],
    'subaru': ['outback', 'forester', 'impreza', 'wrx'],
    'tesla': ['model 3', 'model s', 'model x', 'model y'],
}

# Models that are too short or too common to infer a brand on their own
AMBIGUOUS_MODELS = frozenset({
    'rx', 'nx', 'es', 'is', 'gx', 'lx', 'fit', 'edge', 'rio', 'k5', 'leaf', 'escape',
    'spark', 'golf', 'swift', 'compass', 'accent', 'mirage', 'fusion', 'pilot', 'colorado',
})

# Canonical vehicle type -> bilingual variants
VEHICLE_TYPES: Dict[str, List[str]] = {
    'suv': ['suv', 'suvs', 'jeepeta', 'jeepetas', 'yipeta', 'yipetas', 'todoterreno'],
    'sedan': ['sedan', 'sedán', 'sedans'],
    'truck': ['truck', 'trucks', 'pickup', 'pick-up', 'camión', 'camion', 'camioneta', 'camionetas'],
    'hatchback': ['hatchback', 'hatch'],
    'coupe': ['coupe', 'coupé', 'cupé'],
    'convertible': ['convertible', 'cabrio', 'descapotable'],
    'minivan': ['minivan', 'van', 'furgoneta', 'buseta'],
    'sports': ['sports car', 'deportivo', 'deportivos'],
}

TRANSMISSION_TERMS: Dict[str, List[str]] = {
    'automatic': ['automatic', 'auto transmission', 'automática', 'automatica', 'automático', 'automatico'],
    'manual': ['manual', 'stick shift', 'mecánica', 'mecanica', 'estándar'],
}

FUEL_TERMS: Dict[str, List[str]] = {
    'gasoline': ['gasoline', 'gas', 'petrol', 'gasolina'],
    'diesel': ['diesel', 'diésel', 'gasoil'],
    'electric': ['electric', 'ev', 'eléctrico', 'electrico', 'eléctrica', 'electrica'],
    'hybrid': ['hybrid', 'híbrido', 'hibrido', 'híbrida', 'hibrida'],
}

CONDITION_TERMS: Dict[str, List[str]] = {
    'new': ['new', 'brand new', 'nuevo', 'nueva', 'nuevos', 'nuevas', '0 km', '0km'],
    'used': ['used', 'pre-owned', 'second hand', 'usado', 'usada', 'usados', 'usadas', 'de segunda'],
}

# Engine type words that end up in engine_specs.type
ENGINE_TYPES: List[str] = ['turbocharged', 'turbo', 'supercharged', 'rotary']

# Words that mark a technical (engine-focused) query
TECHNICAL_KEYWORDS: List[str] = ['cylinder', 'cilindro', 'engine', 'motor']

# Bilingual vocabulary that marks a query as automotive without asking the model
AUTOMOTIVE_KEYWORDS: List[str] = [
    # English
    'car', 'cars', 'vehicle', 'vehicles', 'auto', 'automobile', 'truck', 'trucks', 'suv',
    'sedan', 'hatchback', 'minivan', 'van', 'coupe', 'convertible', 'pickup',
    'cylinder', 'cylinders', 'engine', 'transmission', 'mpg', 'mileage',
    'fuel', 'diesel', 'electric', 'hybrid', 'horsepower', 'hp', 'dealer', 'dealership',
    'v4', 'v6', 'v8', 'v12', '4-cylinder', '6-cylinder', '8-cylinder', 'displacement',
    'turbo', 'turbocharged', 'motor', 'awd', 'fwd', 'rwd', '4x4', 'automatic', 'gearbox',
    # Spanish
    'carro', 'carros', 'coche', 'coches', 'vehículo', 'vehículos', 'vehiculo', 'vehiculos',
    'automóvil', 'automóviles', 'camión', 'camioneta', 'jeepeta', 'yipeta', 'sedán',
    'cilindro', 'cilindros', 'transmisión', 'gasolina', 'combustible', 'diésel',
    'eléctrico', 'híbrido', 'caballos', 'concesionario', 'potencia', 'turboalimentado',
    'automática', 'caja de cambios', 'tracción',
]

SPANISH_INDICATORS: List[str] = [
    'el', 'la', 'los', 'las', 'un', 'una', 'unos', 'unas',
    'de', 'del', 'en', 'con', 'por', 'para', 'como', 'que', 'qué', 'cuándo',
    'dónde', 'cómo', 'quién', 'y', 'pero', 'si', 'porque',
    'más', 'menos', 'muy', 'mucho', 'poco', 'este', 'esta', 'estos',
    'estas', 'ese', 'esa', 'esos', 'esas', 'aquel', 'aquella',
    'busco', 'quiero', 'necesito', 'cerca', 'barato', 'barata', 'baratos',
    'carro', 'carros', 'coche', 'coches', 'nuevo', 'nueva', 'usado', 'usada',
    'cuánto', 'cuántos', 'mi', 'tu', 'su',
    'santo domingo', 'república dominicana', 'dominicana',
]

ENGLISH_INDICATORS: List[str] = [
    'the', 'a', 'an', 'of', 'in', 'on', 'at', 'by', 'for', 'with', 'about',
    'from', 'to', 'and', 'or', 'but', 'if', 'because', 'as', 'what', 'when',
    'where', 'how', 'who', 'which', 'this', 'that', 'these', 'those',
    'more', 'less', 'very', 'much', 'few', 'looking', 'find', 'search',
    'show', 'tell', 'give', 'need', 'want', 'near', 'around', 'best',
    'car', 'cars', 'cheap', 'under', 'used', 'new',
    'dominican republic',
]

# Bilingual stop words dropped before token matching
STOP_WORDS = frozenset({
    'a', 'an', 'and', 'are', 'as', 'at', 'be', 'by', 'for', 'from',
    'in', 'is', 'it', 'of', 'on', 'the', 'to', 'was', 'were', 'will', 'with',
    'looking', 'near', 'nearby', 'close', 'i', 'am', 'me', 'my', 'want', 'need',
    'show', 'find', 'some', 'any', 'car', 'cars', 'vehicle', 'vehicles',
    'el', 'la', 'los', 'las', 'un', 'una', 'unos', 'unas', 'cerca', 'de', 'del',
    'con', 'para', 'por', 'que', 'busco', 'buscando', 'quiero', 'necesito',
    'carro', 'carros', 'coche', 'coches', 'vehículo', 'vehículos',
})

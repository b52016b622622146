"""Extraction prompts for Colombian identity documents (cédulas).

The wording is a behavioral contract: the digit-confusion hints, label
locations and date formats below are what drives extraction accuracy.
Both prompts share the number-location, digit, name and date sections;
the multi-image variant also tells the model to read the number from the
front only and to combine what it sees across images.
"""

_NUMBER_LOCATION = """UBICACIÓN ESPECÍFICA:
- Cédulas NUEVAS: Buscar "NUIP" seguido del número (ej: NUIP 2.000.017.701)
- Cédulas ANTIGUAS: Número grande arriba del nombre (ej: 1.020.742.434)
- Extranjería: "No:" seguido del número (ej: No. 379929)"""

_CONFUSABLE_DIGITS = """DÍGITOS PROBLEMÁTICOS - VERIFICA CUIDADOSAMENTE:
- 4 vs 1: El 4 tiene líneas más gruesas y ángulos
- 8 vs 6: El 8 tiene dos círculos cerrados completos
- 0 vs O: Los números son más regulares y uniformes
- 5 vs S: El 5 es más angular, la S es más curva
- 2 vs Z: El 2 tiene base horizontal, la Z es más diagonal

VALIDACIÓN DEL NÚMERO:
- Debe contener SOLO dígitos (0-9)
- Longitud entre 6-11 caracteres
- No puede empezar con 0
- Si encuentras letras mezcladas, es incorrecto"""

_NAMES_AND_DATES = """NOMBRES Y APELLIDOS:
- Busca etiquetas: "APELLIDOS", "NOMBRES"
- Formato típico: "APELLIDO1 APELLIDO2" en una línea, "NOMBRES" en otra
- Extrae principalmente texto IMPRESO/TIPOGRAFIADO
- Si no hay segundo nombre visible, déjalo como null
- NO inventes nombres que no están claramente escritos

FECHAS - BUSCA CUIDADOSAMENTE:
- Fecha de nacimiento: Busca "Fecha de nacimiento" o similar
- Fecha de expedición: Busca "Fecha de expedición", "Fecha y lugar de expedición", o fechas cerca de firmas/sellos
- Formatos posibles: DD/MM/YYYY, DD-MM-YYYY, DD MMM YYYY, YYYY/MM/DD
- Convierte TODO a formato: YYYY-MM-DD
- Si encuentras múltiples fechas, usa contexto para identificar cuál es cuál

MESES EN ESPAÑOL:
ENE=01, FEB=02, MAR=03, ABR=04, MAY=05, JUN=06,
JUL=07, AGO=08, SEP=09, OCT=10, NOV=11, DIC=12"""

_OUTPUT_FORMAT = """Formato de Salida:
Responde ÚNICAMENTE con un JSON válido:
{
  "tipo_documento": "CC|CE|desconocido",
  "numero_cedula": "string con solo números o null",
  "numero_cedula_confianza": 0-100,
  "primer_nombre": "string o null",
  "primer_nombre_confianza": 0-100,
  "segundo_nombre": "string o null",
  "segundo_nombre_confianza": 0-100,
  "primer_apellido": "string o null",
  "primer_apellido_confianza": 0-100,
  "segundo_apellido": "string o null",
  "segundo_apellido_confianza": 0-100,
  "fecha_nacimiento": "YYYY-MM-DD o null",
  "fecha_nacimiento_confianza": 0-100,
  "fecha_expedicion_documento": "YYYY-MM-DD o null",
  "fecha_expedicion_documento_confianza": 0-100
}

Niveles de confianza (0-100):
- 90-100: Texto completamente claro y validado
- 70-89: Muy probable, pequeñas dudas en 1-2 caracteres
- 50-69: Moderadamente seguro, algunos caracteres ambiguos
- 30-49: Poco seguro, varios caracteres dudosos
- 0-29: Muy incierto, texto borroso o dañado

EJEMPLOS DE NÚMEROS VÁLIDOS:
- 51554033 (8 dígitos)
- 1020742434 (10 dígitos)
- 2000017701 (10 dígitos)
- 379929 (6 dígitos - extranjería)"""

SINGLE_IMAGE_PROMPT = """Eres un experto extractor de datos de documentos de identidad colombianos con especialización en OCR de alta precisión. Analiza cuidadosamente la imagen de la cédula.

ANÁLISIS INICIAL:
1. Identifica si es "CÉDULA DE CIUDADANÍA" (CC) o "Cédula de Extranjería" (CE)
2. Determina si es formato antiguo o nuevo (NUIP)

NÚMERO DE DOCUMENTO - OCR CRÍTICO:

""" + _NUMBER_LOCATION + """

TÉCNICAS OCR PARA NÚMEROS:
1. Longitud válida: 6-11 dígitos (ej: 51554033, 1020742434, 2000017701)
2. Elimina puntos y espacios: 1.020.742.434 → 1020742434
3. IGNORA números pequeños como altura (1.78), fechas, códigos

""" + _CONFUSABLE_DIGITS + """

""" + _NAMES_AND_DATES + """

PROCESO DE EXTRACCIÓN:
1. Para el NÚMERO: Examina dígito por dígito, verifica coherencia
2. Para NOMBRES: Solo texto impreso, ignora manuscritos
3. Para FECHAS: Identifica formato y convierte correctamente
4. Asigna confianza basada en claridad visual

""" + _OUTPUT_FORMAT + """

Si un campo es null, su confianza debe ser 0. No agregues texto adicional fuera del JSON."""

MULTI_IMAGE_PROMPT = """Eres un experto extractor de datos de documentos de identidad colombianos con especialización en OCR de alta precisión. Te voy a enviar múltiples imágenes de cédulas (frente y reverso, o un PDF con múltiples páginas).

ANÁLISIS INICIAL - IDENTIFICA EL DOCUMENTO:
1. Localiza el FRENTE (imagen con foto de la persona)
2. Identifica el tipo: "CÉDULA DE CIUDADANÍA" (CC) o "Cédula de Extranjería" (CE)
3. Determina si es formato antiguo o nuevo (NUIP)

NÚMERO DE DOCUMENTO - INSTRUCCIONES CRÍTICAS DE OCR:

""" + _NUMBER_LOCATION + """

TÉCNICAS OCR PARA NÚMEROS:
1. SOLO del FRENTE (donde está la foto) - NUNCA del reverso
2. IGNORA códigos de barras, números pequeños (altura: 1.78), fechas
3. Longitud válida: 6-11 dígitos (ej: 51554033, 1020742434, 2000017701)
4. Elimina puntos y espacios: 1.020.742.434 → 1020742434

""" + _CONFUSABLE_DIGITS + """

""" + _NAMES_AND_DATES + """

PROCESO DE EXTRACCIÓN:
1. Analiza cada imagen cuidadosamente
2. Para el NÚMERO: Examina dígito por dígito, verifica coherencia
3. Para NOMBRES: Solo texto impreso, ignora manuscritos
4. Para FECHAS: Identifica formato y convierte correctamente
5. Asigna confianza basada en claridad visual

""" + _OUTPUT_FORMAT + """

Si un campo es null, su confianza debe ser 0. Analiza todas las imágenes y combina la información más precisa y confiable. No agregues texto adicional fuera del JSON."""

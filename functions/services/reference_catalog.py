"""Reference price catalog for ObraCost.

Cost-basis unit prices (EUR, Spanish market 2025/2026) derived from the
Andalusian construction cost base (BCCA). Read-only: the pipeline only uses
these entries to ground the model's pricing.

Structure: (code, description, unit, unit_price, category, keywords)
Keywords carry the Spanish trade vocabulary so Spanish descriptions match too.
"""

from typing import List, Tuple

from models.reference_price import ReferencePriceEntry


_CATALOG_ROWS: List[Tuple[str, str, str, float, str, Tuple[str, ...]]] = [
    # ── Demolition ─────────────────────────────────────────────────
    ("DEM-001", "Demolition of single hollow-brick partition wall", "m²", 8.50, "Demolition", ("demolicion", "tabique", "partition")),
    ("DEM-003", "Demolition of ceramic floor tiling with removal", "m²", 12.00, "Demolition", ("demolicion", "solado", "floor", "tile")),
    ("DEM-004", "Demolition of ceramic wall tiling with removal", "m²", 11.00, "Demolition", ("demolicion", "alicatado", "wall", "tile")),
    ("DEM-005", "Demolition of plaster false ceiling", "m²", 8.00, "Demolition", ("demolicion", "techo", "ceiling")),
    ("DEM-006", "Removal of sanitary ware (toilet, basin or bidet)", "ud", 25.00, "Demolition", ("desmontaje", "sanitarios", "inodoro", "lavabo")),
    ("DEM-007", "Removal of bathtub or shower tray", "ud", 45.00, "Demolition", ("desmontaje", "bañera", "ducha", "bath", "shower")),
    ("DEM-008", "Removal of interior door with frame", "ud", 18.00, "Demolition", ("desmontaje", "puerta", "door")),
    ("DEM-009", "Removal of window with frame", "ud", 22.00, "Demolition", ("desmontaje", "ventana", "window")),
    ("DEM-011", "Rubble removal with skip container", "m³", 45.00, "Demolition", ("escombros", "contenedor", "debris", "skip")),
    ("DEM-013", "Removal of complete kitchen (units and appliances)", "ud", 380.00, "Demolition", ("desmontaje", "cocina", "kitchen")),
    ("DEM-014", "Opening in load-bearing wall including shoring", "ud", 1200.00, "Demolition", ("muro", "carga", "apeo", "opening")),

    # ── Masonry ────────────────────────────────────────────────────
    ("ALB-001", "Screeded cement render on vertical walls", "m²", 22.00, "Masonry", ("albañileria", "enfoscado", "render")),
    ("ALB-002", "Gypsum plastering and skim coat on walls", "m²", 17.00, "Masonry", ("albañileria", "yeso", "enlucido", "plaster")),
    ("ALB-003", "Double hollow-brick partition wall", "m²", 30.00, "Masonry", ("albañileria", "tabique", "ladrillo", "brick", "partition")),
    ("ALB-005", "Plasterboard partition with metal studs (15+46+15)", "m²", 35.00, "Masonry", ("pladur", "tabiqueria", "drywall", "plasterboard")),
    ("ALB-006", "Plasterboard lining fixed directly to wall", "m²", 28.00, "Masonry", ("pladur", "trasdosado", "drywall", "lining")),
    ("ALB-009", "Continuous plasterboard false ceiling", "m²", 32.00, "Masonry", ("falso", "techo", "pladur", "ceiling")),
    ("ALB-011", "Floor levelling screed with mortar (avg. 3 cm)", "m²", 16.00, "Masonry", ("recrecido", "nivelacion", "suelo", "screed")),
    ("ALB-012", "Builder's work in connection with services", "ud", 550.00, "Masonry", ("ayudas", "albañileria", "instalaciones")),

    # ── Flooring & Tiling ──────────────────────────────────────────
    ("SOL-001", "Rectified porcelain floor tiling 60x60", "m²", 42.00, "Flooring & Tiling", ("solado", "porcelanico", "gres", "suelo", "floor", "tiles")),
    ("SOL-003", "Ceramic wall tiling 30x60", "m²", 34.00, "Flooring & Tiling", ("alicatado", "azulejo", "pared", "wall", "tiles")),
    ("SOL-004", "Rectified porcelain wall tiling", "m²", 45.00, "Flooring & Tiling", ("alicatado", "porcelanico", "wall", "tiles")),
    ("SOL-005", "Ceramic skirting", "ml", 11.00, "Flooring & Tiling", ("rodapie", "skirting")),
    ("SOL-006", "AC4 laminate flooring with insulating underlay", "m²", 30.00, "Flooring & Tiling", ("laminado", "tarima", "suelo", "floor")),
    ("SOL-007", "Click vinyl flooring (SPC/LVT)", "m²", 35.00, "Flooring & Tiling", ("vinilico", "suelo", "vinyl", "floor")),
    ("SOL-008", "Microcement on floors (complete system)", "m²", 78.00, "Flooring & Tiling", ("microcemento", "suelo", "floor")),
    ("SOL-009", "Microcement on walls (complete system)", "m²", 65.00, "Flooring & Tiling", ("microcemento", "pared", "wall")),
    ("SOL-010", "Self-levelling floor compound (3 mm)", "m²", 13.00, "Flooring & Tiling", ("autonivelante", "suelo", "levelling")),

    # ── Plumbing ───────────────────────────────────────────────────
    ("FON-001", "Complete bathroom plumbing (hot and cold water)", "ud", 1050.00, "Plumbing", ("fontaneria", "baño", "bathroom", "water")),
    ("FON-002", "Complete kitchen plumbing", "ud", 800.00, "Plumbing", ("fontaneria", "cocina", "kitchen")),
    ("FON-003", "Toilet supply and installation", "ud", 390.00, "Plumbing", ("inodoro", "wc", "toilet")),
    ("FON-004", "Washbasin with pedestal or vanity unit", "ud", 350.00, "Plumbing", ("lavabo", "mueble", "basin", "vanity")),
    ("FON-005", "Shower tray with taps", "ud", 550.00, "Plumbing", ("plato", "ducha", "griferia", "shower")),
    ("FON-006", "Bathtub with taps", "ud", 650.00, "Plumbing", ("bañera", "griferia", "bath", "bathtub")),
    ("FON-008", "Kitchen sink with mixer tap", "ud", 350.00, "Plumbing", ("fregadero", "griferia", "sink", "cocina")),
    ("FON-010", "PEX multilayer water pipe", "ml", 15.00, "Plumbing", ("tuberia", "multicapa", "pipe", "pipes")),
    ("FON-011", "PVC drain pipe (110 mm)", "ml", 18.00, "Plumbing", ("desague", "pvc", "drain")),
    ("FON-013", "Washing machine or dishwasher drain point", "ud", 80.00, "Plumbing", ("desague", "lavadora", "lavavajillas")),
    ("FON-014", "Electric water heater installation", "ud", 220.00, "Plumbing", ("termo", "calentador", "heater", "boiler")),
    ("FON-015", "Fixed or sliding shower screen", "ud", 420.00, "Plumbing", ("mampara", "ducha", "screen", "shower")),
    ("FON-016", "Wall-hung toilet with concealed cistern", "ud", 720.00, "Plumbing", ("inodoro", "suspendido", "cisterna", "toilet")),

    # ── Electrical ─────────────────────────────────────────────────
    ("ELE-001", "Single lighting point (wiring + switch)", "ud", 68.00, "Electrical", ("punto", "luz", "electricidad", "light", "lighting")),
    ("ELE-002", "Two-way switched lighting point", "ud", 92.00, "Electrical", ("conmutado", "luz", "electricidad", "light")),
    ("ELE-003", "16A socket outlet (wiring + mechanism)", "ud", 60.00, "Electrical", ("enchufe", "electricidad", "socket", "outlet")),
    ("ELE-004", "TV/data outlet (wiring + mechanism)", "ud", 65.00, "Electrical", ("toma", "datos", "tv", "data")),
    ("ELE-005", "Complete dwelling distribution board (up to 10 circuits)", "ud", 480.00, "Electrical", ("cuadro", "electrico", "panel", "board")),
    ("ELE-006", "New electrical circuit (complete wiring)", "ud", 220.00, "Electrical", ("circuito", "electrico", "circuit", "wiring")),
    ("ELE-007", "Complete dwelling electrical installation (up to 80 m²)", "ud", 3800.00, "Electrical", ("instalacion", "electrica", "rewiring", "electrical")),
    ("ELE-008", "Recessed LED downlight", "ud", 42.00, "Electrical", ("downlight", "led", "foco")),
    ("ELE-009", "LED strip with aluminium profile", "ml", 35.00, "Electrical", ("tira", "led", "strip")),
    ("ELE-012", "Air conditioning connection point", "ud", 150.00, "Electrical", ("aire", "acondicionado", "conexion")),
    ("ELE-013", "Bathroom extractor fan with timer", "ud", 105.00, "Electrical", ("extractor", "baño", "fan", "bathroom")),

    # ── Painting ───────────────────────────────────────────────────
    ("PIN-001", "Smooth plastic paint on walls (2 coats)", "m²", 10.00, "Painting", ("pintura", "paredes", "paint", "walls", "painting")),
    ("PIN-002", "Smooth plastic paint on ceilings (2 coats)", "m²", 11.50, "Painting", ("pintura", "techos", "paint", "ceiling", "painting")),
    ("PIN-003", "Synthetic enamel on wooden joinery", "m²", 17.00, "Painting", ("esmalte", "carpinteria", "madera", "enamel")),
    ("PIN-005", "Sealing primer", "m²", 4.50, "Painting", ("imprimacion", "selladora", "primer")),
    ("PIN-006", "Wall smoothing and preparation for painting", "m²", 8.00, "Painting", ("alisado", "gotele", "preparacion", "smoothing")),
    ("PIN-009", "Door lacquering (both faces)", "ud", 150.00, "Painting", ("lacado", "puertas", "lacquer", "doors")),

    # ── Joinery ────────────────────────────────────────────────────
    ("CAR-001", "White lacquered flush interior hinged door", "ud", 390.00, "Joinery", ("puerta", "interior", "door", "doors")),
    ("CAR-002", "Sliding interior door with concealed track", "ud", 580.00, "Joinery", ("puerta", "corredera", "sliding", "door")),
    ("CAR-003", "Armoured entrance door", "ud", 1100.00, "Joinery", ("puerta", "blindada", "entrada", "entrance")),
    ("CAR-004", "Built-in wardrobe with 2 sliding doors (full front)", "ml", 460.00, "Joinery", ("armario", "empotrado", "wardrobe")),
    ("CAR-006", "Thermally broken aluminium window with double glazing", "m²", 340.00, "Joinery", ("ventana", "aluminio", "window", "windows")),
    ("CAR-007", "PVC window with double glazing", "m²", 300.00, "Joinery", ("ventana", "pvc", "window", "windows")),
    ("CAR-009", "Motorised aluminium roller shutter", "m²", 220.00, "Joinery", ("persiana", "motorizada", "shutter")),

    # ── Waterproofing ──────────────────────────────────────────────
    ("IMP-001", "Shower tray waterproofing membrane", "m²", 28.00, "Waterproofing", ("impermeabilizacion", "ducha", "membrane")),
    ("IMP-002", "Flat roof waterproofing with bituminous felt", "m²", 35.00, "Waterproofing", ("impermeabilizacion", "cubierta", "roof")),
    ("IMP-003", "Liquid waterproofing in bathrooms", "m²", 20.00, "Waterproofing", ("impermeabilizacion", "baño", "bathroom")),
    ("IMP-004", "Walkable terrace waterproofing", "m²", 42.00, "Waterproofing", ("impermeabilizacion", "terraza", "terrace")),

    # ── HVAC & Services ────────────────────────────────────────────
    ("INS-001", "Split air conditioning installation (up to 3.5 kW)", "ud", 1100.00, "HVAC", ("aire", "acondicionado", "split", "conditioning")),
    ("INS-003", "Condensing gas boiler installation", "ud", 2600.00, "HVAC", ("caldera", "gas", "boiler")),
    ("INS-004", "Aluminium radiator (per section)", "ud", 35.00, "HVAC", ("radiador", "calefaccion", "radiator", "heating")),
    ("INS-005", "Underfloor heating (complete installation)", "m²", 68.00, "HVAC", ("suelo", "radiante", "underfloor", "heating")),
    ("INS-008", "Air-to-water heat pump (aerothermal)", "ud", 5800.00, "HVAC", ("aerotermia", "bomba", "calor", "heat", "pump")),
    ("INS-009", "Electric towel rail", "ud", 150.00, "HVAC", ("toallero", "towel", "rail")),

    # ── Kitchen ────────────────────────────────────────────────────
    ("COC-001", "Kitchen base unit (60 cm module)", "ud", 220.00, "Kitchen", ("mueble", "bajo", "cocina", "cabinet", "kitchen")),
    ("COC-002", "Kitchen wall unit (60 cm module)", "ud", 185.00, "Kitchen", ("mueble", "alto", "cocina", "cabinet", "kitchen")),
    ("COC-004", "Compact quartz worktop", "ml", 220.00, "Kitchen", ("encimera", "cuarzo", "worktop", "countertop")),
    ("COC-005", "Natural granite worktop", "ml", 185.00, "Kitchen", ("encimera", "granito", "worktop", "countertop")),
    ("COC-007", "Induction hob installation", "ud", 150.00, "Kitchen", ("placa", "induccion", "hob")),
    ("COC-009", "Extractor hood installation", "ud", 185.00, "Kitchen", ("campana", "extractora", "hood")),

    # ── Cleaning ───────────────────────────────────────────────────
    ("LIM-001", "Final builder's clean of dwelling", "m²", 5.50, "Cleaning", ("limpieza", "final", "cleaning")),
    ("LIM-003", "Waste and rubble management", "m³", 42.00, "Cleaning", ("residuos", "escombros", "waste")),

    # ── Miscellaneous ──────────────────────────────────────────────
    ("VAR-001", "Protection of areas not affected by the works", "m²", 4.50, "Miscellaneous", ("proteccion", "protection")),
    ("VAR-003", "Minor works licence and municipal fees", "ud", 420.00, "Miscellaneous", ("licencia", "tasas", "licence", "permit")),
]


def load_catalog() -> List[ReferencePriceEntry]:
    """Build catalog entries from the static rows."""
    return [
        ReferencePriceEntry(
            code=code,
            description=description,
            unit=unit,
            unit_price=unit_price,
            category=category,
            keywords=list(keywords),
        )
        for code, description, unit, unit_price, category, keywords in _CATALOG_ROWS
    ]
